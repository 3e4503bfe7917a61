"""
Setup configuration for viralscripts package.
"""

from setuptools import setup, find_packages

setup(
    name="viralscripts",
    version="0.1.0",
    description="Voice-matched short-form script generation from a viral corpus",
    packages=find_packages(include=["viralscripts", "viralscripts.*"]),
    python_requires=">=3.10",
    install_requires=[
        "supabase>=2.0",
        "anthropic>=0.40",
        "openai>=1.0",
        "pydantic>=2.0",
        "pydantic-graph>=0.4,<2",
        "python-dotenv>=1.0",
        "logfire>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "viralscripts=viralscripts.cli.main:cli",
        ],
    },
)
