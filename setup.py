"""Setup script for dbtransfer."""

from setuptools import find_packages, setup

setup(
    name="dbtransfer",
    version="0.1.0",
    description="Task-based transfer of query results into PostgreSQL tables",
    author="dbtransfer Team",
    packages=find_packages(include=["dbtransfer", "dbtransfer.*"]),
    install_requires=[
        "sqlalchemy>=2.0.0",  # Database connections and SQL execution
        "psycopg2-binary>=2.9.0",  # PostgreSQL driver
        "pandas>=2.0.0",  # Data manipulation for transforms
        "pyarrow>=10.0.0",  # Column type inference
        "click>=8.0.0,<8.2.0",  # CLI framework (typer 0.9 is incompatible with click 8.2+)
        "typer>=0.9.0,<0.10.0",  # Modern CLI framework
        "rich>=13.0.0",  # Console output
        "pyyaml>=6.0",  # Configuration handling
    ],
    extras_require={
        "oracle": [
            "oracledb>=2.0.0",  # Oracle source connector
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "mock>=5.0.0",  # For mocking in tests
        ],
    },
    entry_points={
        "console_scripts": [
            "dbtransfer=dbtransfer.cli.main:app",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
    ],
)
