"""Command-line interface module."""

from src.cli.commands import app, main, read

__all__ = ["app", "read", "main"]
