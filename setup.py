from setuptools import setup, find_packages

setup(
    name="pkgledger",
    version="0.1.0",
    description="Ledger of installed package versions and their dependency graph.",
    license="GPL-3.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.8",
    install_requires=[
        "rich>=13.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "pkgledger=pkgledger.modules.cli:main",
        ],
    },
)
