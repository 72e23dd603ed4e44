from pathlib import Path

from setuptools import find_packages, setup


this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")


setup(
    name="index-composer-runner",
    version="0.1.0",
    description="Submit a batch of prediction-market orders and verify pending prices",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "requests",
        "urllib3",
        "web3",
        "eth-account",
        "pyyaml",  # For orders.yaml batches
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "composer=composer.main:main",
            "composer-wallet=composer.wallet:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
