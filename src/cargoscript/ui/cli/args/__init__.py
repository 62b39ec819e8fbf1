"""Command line argument handling package."""

from cargoscript.ui.cli.args.parser import ArgumentParser
from cargoscript.ui.cli.args.options import CacheArgs, CLIArgs, RunArgs, TemplatesArgs

__all__ = ["ArgumentParser", "CLIArgs", "CacheArgs", "RunArgs", "TemplatesArgs"]
