"""
Setup script for the leadgen-assistant project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

from version import __version__

setup(
    name="leadgen-assistant",
    version=__version__,
    packages=find_packages(include=["leadgen", "leadgen.*"]),
    py_modules=["version"],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "tenacity>=8.2",
        "httpx>=0.25",
        "langchain-core>=0.2",
        "langchain-openai>=0.1",
        "json-repair>=0.25",
        "firecrawl-py>=4.0",
        "pymongo>=4.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
            "pytest-mock>=3.11",
        ],
    },
)
