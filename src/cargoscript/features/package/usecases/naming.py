"""Summary: Derive package and cache-slot names from a logical script.
Why: Names must stay stable across edits yet never collide between scripts.
"""

from __future__ import annotations

import hashlib
import re
from typing import Final

from unidecode import unidecode

from cargoscript.config.settings import FALLBACK_PACKAGE_NAME, SLOT_DISCRIMINATOR_LENGTH
from cargoscript.shared.script_source import ScriptSource

_INVALID_CHARS: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9_]+")
_REPEATED_UNDERSCORES: Final[re.Pattern[str]] = re.compile(r"_{2,}")

# Names cargo refuses as package names.
_RESERVED_NAMES: Final[frozenset[str]] = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
        "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
        "self", "static", "struct", "super", "trait", "true", "type", "unsafe",
        "use", "where", "while", "abstract", "become", "box", "do", "final",
        "macro", "override", "priv", "typeof", "unsized", "virtual", "yield",
        "try", "test", "std", "core", "alloc", "proc_macro",
    }
)


def sanitize_package_name(logical_name: str) -> str:
    """Turn a logical script name into a valid cargo package name.

    Args:
        logical_name: File stem or fixed inline name, any Unicode.

    Returns:
        str: Lower-case ASCII identifier made of ``[a-z0-9_]``. Names that
        start with a digit or clash with a Rust keyword get a ``script_``
        prefix; names with nothing usable become ``script``.
    """
    ascii_name = unidecode(logical_name).lower()
    cleaned = _INVALID_CHARS.sub("_", ascii_name)
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned).strip("_")

    if not cleaned:
        return FALLBACK_PACKAGE_NAME
    if cleaned[0].isdigit() or cleaned in _RESERVED_NAMES:
        return f"{FALLBACK_PACKAGE_NAME}_{cleaned}"
    return cleaned


def slot_name(script: ScriptSource) -> str:
    """Directory name of the script's cache slot.

    The human-facing package name is kept and a short hash of the
    script's location is appended, so ``a/tool.rs`` and ``b/tool.rs`` get
    separate slots while edits to either keep their slot.
    """
    digest = hashlib.sha256(script.discriminator.encode("utf-8")).hexdigest()
    return f"{sanitize_package_name(script.logical_name)}-{digest[:SLOT_DISCRIMINATOR_LENGTH]}"


__all__ = ["sanitize_package_name", "slot_name"]
