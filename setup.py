from setuptools import setup, find_packages

setup(
    name="doc-engine",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        # Markdown front-end
        "tree-sitter>=0.22",
        "tree-sitter-markdown",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "doc-engine=doc_engine.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Semantic-path reading and editing of Markdown documents "
                "with optimistic revisions.",
)
