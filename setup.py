"""
Setup script for factgraph: knowledge graph extraction and layout engine
"""

from setuptools import setup, find_packages

setup(
    name="factgraph",
    version="1.0.0",
    description="Knowledge graph extraction, force-directed layout and exploration",
    long_description="Parses fact blocks out of retrieval-augmented answers into knowledge graphs, lays them out with a force-directed simulation and derives filtered views and summaries",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src", exclude=["tests*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "pydantic>=2.11.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",

        # Layout and graph analysis
        "numpy>=1.24.0",
        "networkx>=3.0",

        # API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "factgraph=factgraph.cli:main",
        ],
    },
    author="FactGraph Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="knowledge-graph graph-rag force-directed-layout fact-extraction",
)
