from setuptools import setup, find_packages

setup(
    name="shipyard-stacks",
    version="0.1.0",
    description="Declarative AWS stacks for a CI/CD pipeline and a standalone instance, compiled to Pulumi",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="Shipyard Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"shipyard.scripts": ["user-data.sh"]},
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "click>=8.0.0",
        "pyyaml>=6.0",
        "pulumi>=3.0.0",
        "pulumi-aws>=6.0.0,<7.0.0",
        "boto3>=1.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "shipyard=shipyard.cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
