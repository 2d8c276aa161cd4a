"""
Setup script for the dlx_db package.
"""

from setuptools import setup, find_packages

setup(
    name="dlx_db",
    version="0.1.0",
    description="Data access layer for the Digital Linguistics (DLx) Cosmos DB database",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-cosmos>=4.5.0",
        "aiohttp>=3.8.0",  # Transport for azure.cosmos.aio
        "pydantic>=2.0.0,<3.0.0",
        "pydantic-settings>=2.0.0",
        "pydantic-yaml>=1.1.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
            "flake8>=6.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
)
