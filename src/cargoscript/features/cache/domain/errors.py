"""Errors raised by the artifact cache and the build it guards."""

from __future__ import annotations

from cargoscript.shared.errors import Blame, CargoScriptError


class CacheUnavailable(CargoScriptError):
    """The cache root cannot be created or written."""

    blame = Blame.ENVIRONMENT
    exit_code = 74


class CorruptMetadata(ValueError):
    """A slot metadata record could not be decoded or validated."""


class BuildFailed(CargoScriptError):
    """The external build did not produce a usable artifact.

    The toolchain's own diagnostics have already been written to stderr;
    ``message`` only says that the build failed and how.
    """

    blame = Blame.TOOLCHAIN

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        if status is not None and status > 0:
            self.exit_code = status


class ToolchainUnavailable(CargoScriptError):
    """``cargo`` or ``rustc`` could not be executed."""

    blame = Blame.ENVIRONMENT
    exit_code = 127


__all__ = ["BuildFailed", "CacheUnavailable", "CorruptMetadata", "ToolchainUnavailable"]
