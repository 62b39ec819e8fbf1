"""Ports consumed around the artifact cache.

Where: features/cache/usecases/ports.py
What: Protocols for the external build, the toolchain identity and artifact execution.
Why: Orchestration depends on these shapes only, so tests can fake the toolchain.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from cargoscript.features.cache.domain.models import BuildFlags, BuildMode


class BuildPort(Protocol):
    """Compile a materialized package directory."""

    def build(self, package_dir: Path, flags: BuildFlags) -> Path:
        """Return the produced executable; raise ``BuildFailed`` on failure."""
        ...


class ToolchainPort(Protocol):
    """Identify the compiler that builds artifacts."""

    def identify(self) -> str:
        """Return a string that changes whenever the compiler changes."""
        ...


class ExecutionPort(Protocol):
    """Run a compiled artifact."""

    def run(self, artifact: Path, args: Sequence[str], mode: BuildMode = BuildMode.RUN) -> int:
        """Execute ``artifact`` and return its exit status."""
        ...


__all__ = ["BuildPort", "ExecutionPort", "ToolchainPort"]
