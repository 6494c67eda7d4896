"""Command-line interface for twig."""

from .main import cli, main

__all__ = ["cli", "main"]
