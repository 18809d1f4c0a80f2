from setuptools import setup, find_packages


setup(
    name="sealkit",
    version="0.1",
    packages=find_packages(include=["sealkit", "sealkit.*"]),
    description="Safe extraction of zstd tarballs and AEAD sealing of small secrets.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
        "zstandard>=0.22.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "sealkit=sealkit.cli:main",
        ]
    },
)
