"""
Setup script for studybuddy.

Study Buddy lets a signed-in user keep notes, attach AI-generated
summaries to them, and study each summary through derived aids:

1. Flashcards - one card per study point, with shuffle and autoplay
2. Mind map - a radial layout of the study points around the note title
3. Quiz - AI-generated questions with scoring and letter grades

The 'studybuddy' command is the CLI entry point; the HTTP API is
served with 'studybuddy serve' or 'uvicorn studybuddy.api.main:app'.
"""

from setuptools import find_packages, setup

setup(
    name="studybuddy",
    version="1.0.0",
    description="Notes, AI summaries and summary-derived study aids",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Study Buddy",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # AI
        "google-generativeai>=0.5.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "studybuddy=studybuddy.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="notes summaries flashcards quiz mind-map education",
)
