"""Setup script for the Grip Invest backend."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="gripinvest",
    version="1.0.0",
    description="Grip Invest platform backend - investment products, portfolios, OTP auth and return calculators",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Grip Invest Team",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*", "*.tests", "*.tests.*"]),
    install_requires=[
        "Flask>=2.2.0",
        "flask-cors>=3.0.10",
        "PyJWT>=2.4.0",
        "python-dateutil>=2.8.0",
        "Werkzeug>=2.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "flake8>=6.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gripinvest=gripinvest.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Financial and Insurance Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: Flask",
        "Topic :: Office/Business :: Financial",
    ],
    keywords="investment, portfolio, bonds, sip, flask, api, finance",
)
