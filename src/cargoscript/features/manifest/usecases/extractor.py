"""Summary: Extract dependency metadata embedded in script comments.
Why: Scripts carry their own build manifest so they can run as single files.

Two embedded syntaxes are recognised, tried in a fixed order:

1. A short-form comment on the first line after the shebang::

       // cargo-deps: time="0.1.25", libc

2. A fenced block tagged ``cargo`` inside an inner doc comment::

       //! ```cargo
       //! [dependencies]
       //! time = "0.1.25"
       //! ```

Each detector is a pure function returning ``None`` when its syntax is
absent. Finding more than one manifest is an error rather than a silent
first-match.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Final

from cargoscript.features.manifest.domain.errors import (
    InvalidManifestSyntax,
    MalformedManifest,
    MultipleManifests,
)
from cargoscript.features.manifest.domain.models import (
    WILDCARD_VERSION,
    DependencySpec,
    ExtractionResult,
    ManifestDeclaration,
    ManifestFormat,
)
from cargoscript.platform.logging import logger

SHORT_FORM_MARKER: Final[str] = "cargo-deps:"
FENCE_LANGUAGE: Final[str] = "cargo"

_BOM: Final[str] = "\ufeff"
_SHORT_FORM_LINE: Final[re.Pattern[str]] = re.compile(
    r"^\s*//(?![/!])\s*" + re.escape(SHORT_FORM_MARKER) + r"(?P<payload>.*)$"
)
_DEPENDENCY_ENTRY: Final[re.Pattern[str]] = re.compile(
    r"""^(?P<name>[A-Za-z0-9_][A-Za-z0-9_-]*)
        (?:\s+as\s+(?P<alias>[A-Za-z_][A-Za-z0-9_]*))?
        \s*(?:=\s*"(?P<version>[^"]*)")?$""",
    re.VERBOSE,
)
_FENCE_OPEN: Final[re.Pattern[str]] = re.compile(r"^\s*```\s*" + FENCE_LANGUAGE + r"\s*$")
_FENCE_CLOSE: Final[re.Pattern[str]] = re.compile(r"^\s*```\s*$")
_TOML_ERROR_LINE: Final[re.Pattern[str]] = re.compile(r"at line (\d+)")


@dataclass(slots=True, frozen=True)
class _Line:
    number: int
    text: str


@dataclass(slots=True, frozen=True)
class _Candidate:
    format: ManifestFormat
    declaration: ManifestDeclaration
    body_lines: tuple[_Line, ...]
    line: _Line


def extract_manifest(text: str) -> ExtractionResult:
    """Split a script into its manifest declaration and residual body.

    Args:
        text: Raw script text. A leading BOM, CRLF line endings and a
            shebang line are tolerated.

    Returns:
        ExtractionResult: Declaration (empty when no manifest is present)
        and the body with the shebang and any short-form comment removed.

    Raises:
        MalformedManifest: A short-form comment is misplaced or unparsable.
        MultipleManifests: More than one manifest was found.
        InvalidManifestSyntax: A fenced block is unterminated or not TOML.
    """
    lines = _split_lines(text)
    if lines and _is_shebang(lines[0].text):
        lines = lines[1:]

    candidates = [
        candidate
        for detector in _DETECTORS
        if (candidate := detector(lines)) is not None
    ]

    if len(candidates) > 1:
        second = candidates[1].line
        raise MultipleManifests(
            f"found both a {candidates[0].format.value} and a {candidates[1].format.value} manifest",
            line=second.number,
            line_text=second.text,
        )

    if not candidates:
        return ExtractionResult(
            declaration=ManifestDeclaration(),
            body=_join(lines),
            format=ManifestFormat.ABSENT,
        )

    chosen = candidates[0]
    logger.debug(
        "Extracted %s manifest with %d dependencies",
        chosen.format.value,
        len(chosen.declaration.dependencies),
    )
    return ExtractionResult(
        declaration=chosen.declaration,
        body=_join(chosen.body_lines),
        format=chosen.format,
    )


def parse_dependency_spec(entry: str, *, line: _Line | None = None) -> DependencySpec:
    """Parse ``name``, ``name="1.0"`` or ``name as alias="1.0"``.

    Raises:
        MalformedManifest: If the entry does not match any accepted form.
    """
    number = line.number if line else None
    line_text = line.text if line else None

    match = _DEPENDENCY_ENTRY.match(entry.strip())
    if match is None:
        raise MalformedManifest(
            f"cannot parse dependency '{entry.strip()}'", line=number, line_text=line_text
        )

    version = match.group("version")
    if version is not None and not version.strip():
        raise MalformedManifest(
            f"empty version for dependency '{match.group('name')}'",
            line=number,
            line_text=line_text,
        )

    return DependencySpec(
        name=match.group("name"),
        version=version.strip() if version is not None else WILDCARD_VERSION,
        alias=match.group("alias"),
    )


def parse_dependency_arg(value: str) -> DependencySpec:
    """Parse a command-line ``NAME`` or ``NAME=VERSION`` dependency."""

    name, sep, version = value.partition("=")
    if not sep:
        return parse_dependency_spec(name)
    version = version.strip().strip('"')
    return parse_dependency_spec(f'{name.strip()}="{version}"')


def _split_lines(text: str) -> list[_Line]:
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [_Line(number=index + 1, text=raw) for index, raw in enumerate(text.split("\n"))]


def _join(lines: Sequence[_Line]) -> str:
    return "\n".join(line.text for line in lines)


def _is_shebang(line: str) -> bool:
    # `#![...]` is a Rust inner attribute, not a shebang.
    return line.startswith("#!") and not line.startswith("#![")


# Short-form comment ---------------------------------------------------------


def _detect_short_form(lines: Sequence[_Line]) -> _Candidate | None:
    marker_lines = [line for line in lines if _SHORT_FORM_LINE.match(line.text)]
    if not marker_lines:
        return None

    first = marker_lines[0]
    if not lines or first is not lines[0]:
        raise MalformedManifest(
            f"'{SHORT_FORM_MARKER}' comment must be the first line of the script",
            line=first.number,
            line_text=first.text,
        )
    if len(marker_lines) > 1:
        extra = marker_lines[1]
        raise MalformedManifest(
            f"'{SHORT_FORM_MARKER}' comment may only appear once",
            line=extra.number,
            line_text=extra.text,
        )

    match = _SHORT_FORM_LINE.match(first.text)
    assert match is not None
    specs = tuple(
        parse_dependency_spec(entry, line=first)
        for entry in _split_entries(match.group("payload"), first)
    )
    return _Candidate(
        format=ManifestFormat.SHORT_FORM,
        declaration=_declaration(specs, None, first),
        body_lines=tuple(lines[1:]),
        line=first,
    )


def _split_entries(payload: str, line: _Line) -> list[str]:
    """Split on commas that are not inside double quotes."""

    if not payload.strip():
        return []

    entries: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in payload:
        if char == '"':
            in_quotes = not in_quotes
        if char == "," and not in_quotes:
            entries.append("".join(current))
            current = []
            continue
        current.append(char)
    if in_quotes:
        raise MalformedManifest("unterminated quoted version", line=line.number, line_text=line.text)
    entries.append("".join(current))

    for entry in entries:
        if not entry.strip():
            raise MalformedManifest("empty dependency entry", line=line.number, line_text=line.text)
    return entries


def _declaration(
    specs: tuple[DependencySpec, ...], fragment: dict[str, Any] | None, line: _Line
) -> ManifestDeclaration:
    try:
        return ManifestDeclaration(dependencies=specs, fragment=fragment)
    except MalformedManifest as exc:
        raise MalformedManifest(exc.message, line=line.number, line_text=line.text) from exc


# Fenced documentation block --------------------------------------------------


def _detect_fenced(lines: Sequence[_Line]) -> _Candidate | None:
    blocks: list[list[_Line]] = []
    for group in _doc_comment_groups(lines):
        blocks.extend(_fenced_blocks(group))

    if not blocks:
        return None
    if len(blocks) > 1:
        opener = blocks[1][0]
        raise MultipleManifests(
            f"more than one ```{FENCE_LANGUAGE} block", line=opener.number, line_text=opener.text
        )

    opener, *content = blocks[0]
    fragment = _parse_fragment(content, opener)
    return _Candidate(
        format=ManifestFormat.FENCED,
        declaration=_declaration((), fragment, opener),
        body_lines=tuple(lines),
        line=opener,
    )


def _doc_comment_groups(lines: Sequence[_Line]) -> list[list[_Line]]:
    """Collect inner doc comments as groups of de-commented lines.

    Consecutive ``//!`` lines form one group; each ``/*! ... */`` block forms
    another. Line numbers point at the original script lines.
    """
    groups: list[list[_Line]] = []
    current: list[_Line] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        stripped = line.text.lstrip()
        if stripped.startswith("//!"):
            current.append(_Line(line.number, _drop_one_space(stripped[3:])))
            index += 1
            continue
        if current:
            groups.append(current)
            current = []
        if stripped.startswith("/*!"):
            block, index = _collect_block_comment(lines, index)
            groups.append(block)
            continue
        index += 1
    if current:
        groups.append(current)
    return groups


def _collect_block_comment(lines: Sequence[_Line], start: int) -> tuple[list[_Line], int]:
    block: list[_Line] = []
    index = start
    while index < len(lines):
        line = lines[index]
        text = line.text
        if index == start:
            text = text.lstrip()[3:]
        else:
            stripped = text.lstrip()
            if stripped.startswith("*") and not stripped.startswith("*/"):
                text = _drop_one_space(stripped[1:])
        end = text.find("*/")
        if end >= 0:
            if text[:end].strip():
                block.append(_Line(line.number, text[:end]))
            return block, index + 1
        block.append(_Line(line.number, text))
        index += 1
    return block, index


def _drop_one_space(text: str) -> str:
    return text[1:] if text.startswith(" ") else text


def _fenced_blocks(group: Sequence[_Line]) -> list[list[_Line]]:
    """Return each ``cargo`` fence as ``[opener, *content]``."""

    blocks: list[list[_Line]] = []
    index = 0
    while index < len(group):
        line = group[index]
        if not _FENCE_OPEN.match(line.text):
            index += 1
            continue
        block = [line]
        index += 1
        while index < len(group) and not _FENCE_CLOSE.match(group[index].text):
            block.append(group[index])
            index += 1
        if index >= len(group):
            raise InvalidManifestSyntax(
                f"unterminated ```{FENCE_LANGUAGE} block", line=line.number, line_text=line.text
            )
        blocks.append(block)
        index += 1
    return blocks


def _parse_fragment(content: Sequence[_Line], opener: _Line) -> dict[str, Any]:
    source = "\n".join(line.text for line in content)
    try:
        return tomllib.loads(source)
    except tomllib.TOMLDecodeError as exc:
        offending = _toml_error_line(exc, content) or opener
        raise InvalidManifestSyntax(
            f"invalid manifest: {exc}", line=offending.number, line_text=offending.text
        ) from exc


def _toml_error_line(exc: tomllib.TOMLDecodeError, content: Sequence[_Line]) -> _Line | None:
    lineno = getattr(exc, "lineno", None)
    if not isinstance(lineno, int):
        match = _TOML_ERROR_LINE.search(str(exc))
        lineno = int(match.group(1)) if match else None
    if lineno is None or not 1 <= lineno <= len(content):
        return None
    return content[lineno - 1]


_DETECTORS: Final[tuple[Callable[[Sequence[_Line]], _Candidate | None], ...]] = (
    _detect_short_form,
    _detect_fenced,
)


__all__ = [
    "FENCE_LANGUAGE",
    "SHORT_FORM_MARKER",
    "extract_manifest",
    "parse_dependency_arg",
    "parse_dependency_spec",
]
