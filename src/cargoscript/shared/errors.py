"""Where: src/cargoscript/shared/errors.py
What: Base error type shared by every feature layer.
Why: Let the CLI translate any domain failure into a blame-aware exit code.
"""

from __future__ import annotations

from enum import Enum


class Blame(str, Enum):
    """Who is responsible for a failure."""

    HUMAN = "human"
    TEMPLATE = "template"
    ENVIRONMENT = "environment"
    TOOLCHAIN = "toolchain"


class CargoScriptError(Exception):
    """Base class for all expected cargoscript failures."""

    blame: Blame = Blame.HUMAN
    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


__all__ = ["Blame", "CargoScriptError"]
