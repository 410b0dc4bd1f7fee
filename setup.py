"""
Setup script for skill-sense project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="skill-sense",
    version="0.1.0",
    packages=find_packages(include=["src", "src.*"]),
    python_requires=">=3.11",
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.0",
        "tenacity>=8.2.0",
        "pymongo>=4.6",
        "requests>=2.31.0",
        "json-repair>=0.25.0",
        "google-genai>=1.0.0",
        "google-cloud-storage>=2.14.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
)
