"""
yogen - Go code generator for Google Cloud Spanner
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="yogen",
    version="0.1.0",
    author="Diegoproggramer",
    author_email="",
    description="Generate Go data-access code from Cloud Spanner schemas",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Diegoproggramer/yogen",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"yogen": ["templates/*.go.j2"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
        "Jinja2>=3.1",
        "google-cloud-spanner>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "yogen=yogen.cli:cli_main",
        ],
    },
    keywords="spanner, generator, go, golang, code-generator, ddl",
    project_urls={
        "Bug Reports": "https://github.com/Diegoproggramer/yogen/issues",
        "Source": "https://github.com/Diegoproggramer/yogen",
    },
)
