"""Command line interface for pages-deploy"""

from .main import cli, main

__all__ = ["cli", "main"]
