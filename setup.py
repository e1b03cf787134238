"""
Setup script for the logfmt encoder and conversion pipeline.
"""
from setuptools import setup, find_packages

setup(
    name="logfmt-encoder",
    version="1.0.0",
    description="Structured-value encoder for logfmt key=value log lines",
    author="Your Name",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config", "main"],
    install_requires=[
        "python-dotenv>=1.0.0",
        "tqdm>=4.66.1",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": ["jsonl-to-logfmt=main:main"],
    },
    python_requires=">=3.8",
)
