"""Command line interface package."""

from cargoscript.ui.cli.cli import CommandProcessor, main

__all__ = ["CommandProcessor", "main"]
