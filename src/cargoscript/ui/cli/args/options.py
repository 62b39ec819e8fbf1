"""Command line argument options."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, final

from cargoscript.features.cache import BuildMode
from cargoscript.features.manifest import DependencySpec
from cargoscript.features.package import InvocationMode


@final
@dataclass(slots=True)
class RunArgs:
    """Command line arguments for the ``run`` subcommand."""

    command: Literal["run"]
    script_path: Path | None
    code: str | None
    mode: InvocationMode
    script_args: tuple[str, ...]
    template_name: str | None
    dependencies: tuple[DependencySpec, ...]
    unstable_features: tuple[str, ...]
    features: tuple[str, ...]
    build_mode: BuildMode
    release: bool
    force: bool
    build_only: bool
    gen_pkg_only: bool
    pkg_path: Path | None
    verbose: bool
    quiet: bool


@final
@dataclass(slots=True)
class TemplatesArgs:
    """Command line arguments for the ``templates`` subcommand."""

    command: Literal["templates"]
    action: Literal["list", "dump", "dir"]
    name: str | None
    create: bool


@final
@dataclass(slots=True)
class CacheArgs:
    """Command line arguments for the ``cache`` subcommand."""

    command: Literal["cache"]
    action: Literal["clear", "gc"]


CLIArgs = RunArgs | TemplatesArgs | CacheArgs

__all__ = ["CLIArgs", "CacheArgs", "RunArgs", "TemplatesArgs"]
