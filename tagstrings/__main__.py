"""
Entry point for running tagstrings as a module.

Usage:
    python -m tagstrings --help
    python -m tagstrings sync myproject --add-language de
    python -m tagstrings scan myproject
"""
from .cli import app


if __name__ == "__main__":
    app()
