from __future__ import annotations

import os
import sys
import argparse
import logging
import tempfile

from contextlib import contextmanager
from typing import BinaryIO, Iterator, List

from iocrypt.constants import DEFAULT_CHUNK_SIZE, AES256_KEY_SIZE, KEY_SIZES
from iocrypt.errors import IocryptError
from iocrypt.header import header_size, iter_headers
from iocrypt.nonce import random_key
from iocrypt.stream import decrypt_n, encrypt


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _safe_chmod(path: str, mode: int) -> None:
    """Best‑effort chmod that never raises.

    Args:
        path: Destination filesystem path to update.
        mode: POSIX mode to apply (e.g., 0o600).
    """
    try:
        os.chmod(path, mode)
    except OSError as exc:
        print(f"Warning: failed to set mode on {path}: {exc}", file=sys.stderr)


def _safe_remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        print(f"Warning: failed to remove partial output {path}: {exc}", file=sys.stderr)


def _report(msg: str, output: str, quiet: bool) -> None:
    """Print a summary line, keeping stdout clean when it carries data."""
    if quiet:
        return
    print(msg, file=sys.stderr if output == "-" else sys.stdout)


def load_key(key_file: str) -> bytes:
    """Read a raw key file written by ``iocrypt keygen``."""
    with open(key_file, "rb") as f:
        return f.read()


@contextmanager
def _open_input(path: str) -> Iterator[BinaryIO]:
    if path == "-":
        yield sys.stdin.buffer
        return
    with open(path, "rb") as f:
        yield f


@contextmanager
def _open_output(path: str) -> Iterator[BinaryIO]:
    """Write to a temp file beside ``path`` and swap it in only if the body succeeds.

    An existing ``path`` is left untouched on failure.
    """
    if path == "-":
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    out_dir = os.path.dirname(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(prefix=".iocrypt-", suffix=".part", dir=out_dir)
    try:
        with os.fdopen(fd, "wb") as f:
            yield f
    except BaseException:
        _safe_remove(temp_path)
        raise
    os.replace(temp_path, path)


def _check_distinct(input: str, output: str) -> None:
    if input == "-" or output == "-":
        return
    if os.path.exists(input) and os.path.exists(output) and os.path.samefile(input, output):
        raise ValueError(f"input and output are the same file: {output}")


def cmd_keygen(output: str, *, size: int = AES256_KEY_SIZE, force: bool = False, quiet: bool = False) -> bool:
    """Write a new random raw key to ``output``.

    Args:
        output: Key file path (``-`` for stdout).
        size: Key size in bytes (16 for AES-128, 32 for AES-256).
        force: Overwrite an existing key file.
    """
    key = random_key(size)
    if output == "-":
        sys.stdout.buffer.write(key)
        sys.stdout.buffer.flush()
        return True
    if os.path.exists(output) and not force:
        raise FileExistsError(f"{output} already exists (use --force to overwrite)")
    with open(output, "wb") as f:
        f.write(key)
    _safe_chmod(output, 0o600)
    _report(f"Wrote {size * 8}-bit key to {output}", output, quiet)
    return True


def cmd_encrypt(
    input: str,
    output: str,
    *,
    key_file: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    quiet: bool = False,
) -> int:
    """Encrypt ``input`` into ``output``.

    Args:
        input: Plaintext path (``-`` for stdin).
        output: Container path (``-`` for stdout). Replaced only when encryption succeeds.
        key_file: Raw key file.
        chunk_size: Plaintext bytes per chunk.

    Returns:
        Number of container bytes written.
    """
    _check_distinct(input, output)
    key = load_key(key_file)
    with _open_input(input) as src, _open_output(output) as dst:
        n = encrypt(src, dst, key, chunk_size=chunk_size)
    _report(f"Wrote {n} encrypted bytes to {output}", output, quiet)
    return n


def cmd_decrypt(
    input: str,
    output: str,
    *,
    key_file: str,
    max_len: int = 0,
    quiet: bool = False,
) -> int:
    """Decrypt ``input`` into ``output``.

    Args:
        input: Container path (``-`` for stdin).
        output: Plaintext path (``-`` for stdout). Replaced only when decryption succeeds.
        key_file: Raw key file.
        max_len: If >0, decode exactly this many input bytes and ignore the rest.

    Returns:
        Number of plaintext bytes written.
    """
    _check_distinct(input, output)
    key = load_key(key_file)
    with _open_input(input) as src, _open_output(output) as dst:
        n = decrypt_n(src, dst, key, max_len)
    _report(f"Wrote {n} decrypted bytes to {output}", output, quiet)
    return n


def cmd_info(input: str) -> bool:
    """List the chunk headers of a container. No key is needed.

    Args:
        input: Container path (``-`` for stdin).
    """
    hsize = header_size()
    chunks = 0
    payload_total = 0
    print(f"Container: {input}")
    with _open_input(input) as src:
        for h in iter_headers(src):
            print(f"  chunk {chunks}\toffset={h.offset}\tnonce={h.nonce.hex()}\tpayload={h.payload_len}")
            chunks += 1
            payload_total += h.payload_len
    print(f"  Chunks: {chunks}")
    print(f"  Payload bytes: {payload_total}")
    print(f"  Total bytes: {payload_total + chunks * hsize}")
    return True


def _positive_int(text: str) -> int:
    v = int(text)
    if v <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return v


def _non_negative_int(text: str) -> int:
    v = int(text)
    if v < 0:
        raise argparse.ArgumentTypeError("must be zero or a positive integer")
    return v


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="iocrypt",
        description="Chunked AES-GCM stream encryption",
        epilog="Use '-' as a path to read from stdin or write to stdout.",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log per-chunk details to stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_keygen = sub.add_parser("keygen", help="Generate a random raw key file")
    ap_keygen.add_argument("output", help="Key file path")
    ap_keygen.add_argument(
        "--size", type=int, choices=list(KEY_SIZES), default=AES256_KEY_SIZE,
        help="Key size in bytes: 16 (AES-128) or 32 (AES-256, default)",
    )
    ap_keygen.add_argument("--force", action="store_true", help="Overwrite an existing key file")
    ap_keygen.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_encrypt = sub.add_parser("encrypt", help="Encrypt a file or stream")
    ap_encrypt.add_argument("input", help="Plaintext path")
    ap_encrypt.add_argument("output", help="Container output path")
    ap_encrypt.add_argument("--key-file", "-k", required=True, help="Raw key file")
    ap_encrypt.add_argument(
        "--chunk-size", type=_positive_int, default=DEFAULT_CHUNK_SIZE,
        help=f"Plaintext bytes per chunk (default {DEFAULT_CHUNK_SIZE})",
    )
    ap_encrypt.add_argument("--quiet", help="suppress the summary line", action="store_true")

    ap_decrypt = sub.add_parser("decrypt", help="Decrypt a container")
    ap_decrypt.add_argument("input", help="Container path")
    ap_decrypt.add_argument("output", help="Plaintext output path")
    ap_decrypt.add_argument("--key-file", "-k", required=True, help="Raw key file")
    ap_decrypt.add_argument(
        "--max-len", type=_non_negative_int, default=0,
        help="Decode exactly this many input bytes (headers included); 0 reads to end of input",
    )
    ap_decrypt.add_argument("--quiet", help="suppress the summary line", action="store_true")

    ap_info = sub.add_parser("info", help="List chunk headers (no key needed)")
    ap_info.add_argument("input", help="Container path")

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT, stream=sys.stderr)
    try:
        if args.cmd == "keygen":
            cmd_keygen(args.output, size=args.size, force=args.force, quiet=args.quiet)
        elif args.cmd == "encrypt":
            cmd_encrypt(args.input, args.output, key_file=args.key_file, chunk_size=args.chunk_size, quiet=args.quiet)
        elif args.cmd == "decrypt":
            cmd_decrypt(args.input, args.output, key_file=args.key_file, max_len=args.max_len, quiet=args.quiet)
        elif args.cmd == "info":
            cmd_info(args.input)
        else:
            raise RuntimeError("Unknown command")
    except (IocryptError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
