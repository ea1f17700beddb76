from setuptools import find_packages, setup

setup(
    name="otrust-cli",
    version="1.0.0",
    description="Command-line interface for the OTRUST distributed truth protocol",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "cryptography",
        "requests",
        "click",
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "otrust-cli=otrust.cli:cli",
        ],
    },
)
