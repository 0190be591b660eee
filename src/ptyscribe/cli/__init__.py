"""Command-line interface for ptyscribe."""

from ptyscribe.cli.app import entrypoint, main

__all__ = ["entrypoint", "main"]
