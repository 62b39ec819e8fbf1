"""Script source records shared by the extractor, synthesizer and cache."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import Blame, CargoScriptError

EXPRESSION_SCRIPT_NAME: Final[str] = "expr"
FILTER_SCRIPT_NAME: Final[str] = "loop"
SCRIPT_SUFFIX: Final[str] = ".rs"


class ScriptNotFound(CargoScriptError):
    """The script path does not name a readable file."""

    blame = Blame.HUMAN
    exit_code = 66


def resolve_script_path(path: Path) -> Path:
    """Return ``path``, or ``path`` with ``.rs`` appended when only that exists.

    Raises:
        ScriptNotFound: If neither candidate is a file.
    """
    candidate = path.expanduser()
    if candidate.is_file():
        return candidate
    if not candidate.suffix:
        with_suffix = candidate.with_name(candidate.name + SCRIPT_SUFFIX)
        if with_suffix.is_file():
            return with_suffix
    raise ScriptNotFound(f"script not found: {path}")


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """Raw script text plus where it came from.

    Attributes:
        text: Script contents exactly as read (BOM and CRLF included).
        origin: Resolved path of the script file, or ``None`` for inline code.
        logical_name: Stable name keying the script's cache slot.
    """

    text: str
    origin: Path | None
    logical_name: str

    @classmethod
    def from_path(cls, path: Path) -> "ScriptSource":
        """Read a script file; the logical name is the file stem.

        Raises:
            ScriptNotFound: If the file is missing or unreadable.
        """
        resolved = resolve_script_path(path).resolve()
        try:
            text = resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ScriptNotFound(f"cannot read script {resolved}: {exc}") from exc
        return cls(text=text, origin=resolved, logical_name=resolved.stem)

    @classmethod
    def inline(cls, text: str, logical_name: str) -> "ScriptSource":
        """Wrap code passed on the command line."""

        return cls(text=text, origin=None, logical_name=logical_name)

    @property
    def discriminator(self) -> str:
        """Value that separates same-named scripts living in different places."""

        if self.origin is not None:
            return str(self.origin)
        return self.logical_name


__all__ = [
    "EXPRESSION_SCRIPT_NAME",
    "FILTER_SCRIPT_NAME",
    "SCRIPT_SUFFIX",
    "ScriptNotFound",
    "ScriptSource",
    "resolve_script_path",
]
