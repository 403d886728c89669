"""Setup script for the transaction-time filter library"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="transaction-time",
    version="1.0.0",
    author="SEEFA Observability Team",
    author_email="observability@seefa.com",
    description="Pairs events by UID and measures the elapsed time between them",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/goldenfamilyfarms/correlation-station",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Logging",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.10.0",
        "pydantic-settings>=2.7.0",
        "structlog>=23.2.0",
        "prometheus-client>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ]
    },
)
