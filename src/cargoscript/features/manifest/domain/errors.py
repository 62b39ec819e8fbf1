"""Errors raised while reading manifest metadata embedded in scripts."""

from __future__ import annotations

from cargoscript.shared.errors import Blame, CargoScriptError


class ManifestError(CargoScriptError):
    """Base class for problems with a script's embedded manifest.

    Attributes:
        line: 1-based line number in the script, when known.
        line_text: The offending line, when known.
    """

    blame = Blame.HUMAN
    exit_code = 65

    def __init__(self, message: str, *, line: int | None = None, line_text: str | None = None) -> None:
        self.line = line
        self.line_text = line_text
        if line is not None:
            message = f"line {line}: {message}"
            if line_text is not None:
                message = f"{message}\n    {line_text.strip()}"
        super().__init__(message)


class MalformedManifest(ManifestError):
    """Short-form dependency comment is misplaced or unparsable."""


class MultipleManifests(ManifestError):
    """More than one manifest declaration was found in a script."""


class InvalidManifestSyntax(ManifestError):
    """A fenced manifest block does not contain valid TOML."""


__all__ = [
    "InvalidManifestSyntax",
    "MalformedManifest",
    "ManifestError",
    "MultipleManifests",
]
