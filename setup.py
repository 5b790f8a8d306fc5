from setuptools import setup, find_packages


setup(
    name="iocrypt",
    version="0.1",
    packages=find_packages(include=["iocrypt", "iocrypt.*"]),
    description="Encrypt and decrypt arbitrarily large byte streams with chunked AES-GCM.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "iocrypt=iocrypt.cli:main",
        ]
    },
)
