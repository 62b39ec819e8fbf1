"""Shared primitives used across feature packages."""

from .errors import Blame, CargoScriptError
from .script_source import (
    EXPRESSION_SCRIPT_NAME,
    FILTER_SCRIPT_NAME,
    SCRIPT_SUFFIX,
    ScriptNotFound,
    ScriptSource,
    resolve_script_path,
)

__all__ = [
    "Blame",
    "CargoScriptError",
    "EXPRESSION_SCRIPT_NAME",
    "FILTER_SCRIPT_NAME",
    "SCRIPT_SUFFIX",
    "ScriptNotFound",
    "ScriptSource",
    "resolve_script_path",
]
