"""
Setup configuration for creatorpulse package.
"""

from setuptools import setup, find_packages

setup(
    name="creatorpulse",
    version="0.1.0",
    description="AI video script generation and creator performance dashboard",
    packages=find_packages(include=["creatorpulse", "creatorpulse.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "openai>=1.0",
        "httpx>=0.24",
        "python-dotenv>=1.0",
        "logfire>=0.40",
        "click>=8.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "slowapi>=0.1.9",
        "streamlit>=1.37",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "creatorpulse=creatorpulse.cli.main:cli",
        ],
    },
)
