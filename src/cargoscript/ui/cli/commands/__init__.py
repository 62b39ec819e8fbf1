"""Command execution package for CLI."""

from cargoscript.ui.cli.commands.cache import CacheCommand
from cargoscript.ui.cli.commands.run import RunCommand
from cargoscript.ui.cli.commands.templates import TemplatesCommand

__all__ = ["CacheCommand", "RunCommand", "TemplatesCommand"]
