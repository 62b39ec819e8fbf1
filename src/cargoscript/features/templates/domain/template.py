"""Two-placeholder source templates.

A template is Rust source containing exactly one ``#{prelude}`` and exactly
one ``#{script}`` placeholder. Rendering is a single pass over the text split
at those two positions, so placeholder-like text inside the substituted values
is never expanded again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Final, final

from .errors import TemplateMissingPlaceholder

PRELUDE_PLACEHOLDER: Final[str] = "prelude"
SCRIPT_PLACEHOLDER: Final[str] = "script"


class TemplateOrigin(str, Enum):
    """Where a template was loaded from."""

    USER = "user"
    BUILTIN = "builtin"
    INTERNAL = "internal"


@final
@dataclass(slots=True, frozen=True)
class Template:
    """A validated template split around its two placeholders."""

    name: str
    text: str
    origin: TemplateOrigin
    segments: tuple[str, str, str]
    prelude_first: bool
    path: Path | None = None

    PLACEHOLDER: ClassVar[re.Pattern[str]] = re.compile(r"#\{([^{}]*)\}")
    NESTED: ClassVar[re.Pattern[str]] = re.compile(r"#\{[^}]*#\{")

    def render(self, prelude: str, script: str) -> str:
        """Substitute ``prelude`` and ``script`` into the template."""

        head, middle, tail = self.segments
        first, second = (prelude, script) if self.prelude_first else (script, prelude)
        return f"{head}{first}{middle}{second}{tail}"


def validate_template(
    name: str,
    text: str,
    *,
    origin: TemplateOrigin = TemplateOrigin.USER,
    path: Path | None = None,
) -> Template:
    """Check placeholder structure and build a ``Template``.

    Args:
        name: Template identifier, used in error messages.
        text: Raw template text.
        origin: Where the text came from.
        path: File the text was read from, if any.

    Returns:
        Template: Validated template ready for rendering.

    Raises:
        TemplateMissingPlaceholder: If either placeholder is missing or
            repeated, or if placeholders are nested.
    """
    nested = Template.NESTED.search(text)
    if nested is not None:
        raise TemplateMissingPlaceholder(
            f"template '{name}' nests placeholders near offset {nested.start()}"
        )

    positions: dict[str, list[re.Match[str]]] = {PRELUDE_PLACEHOLDER: [], SCRIPT_PLACEHOLDER: []}
    for match in Template.PLACEHOLDER.finditer(text):
        key = match.group(1).strip()
        if key in positions:
            positions[key].append(match)

    for key, found in positions.items():
        if len(found) != 1:
            problem = "is missing" if not found else f"appears {len(found)} times"
            raise TemplateMissingPlaceholder(
                f"template '{name}': placeholder '#{{{key}}}' {problem}; exactly one is required"
            )

    prelude = positions[PRELUDE_PLACEHOLDER][0]
    script = positions[SCRIPT_PLACEHOLDER][0]
    first, second = sorted((prelude, script), key=lambda match: match.start())
    segments = (
        text[: first.start()],
        text[first.end() : second.start()],
        text[second.end() :],
    )
    return Template(
        name=name,
        text=text,
        origin=origin,
        segments=segments,
        prelude_first=first is prelude,
        path=path,
    )


PASSTHROUGH_TEMPLATE: Final[Template] = validate_template(
    "script",
    "#{prelude}#{script}",
    origin=TemplateOrigin.INTERNAL,
)


__all__ = [
    "PASSTHROUGH_TEMPLATE",
    "PRELUDE_PLACEHOLDER",
    "SCRIPT_PLACEHOLDER",
    "Template",
    "TemplateOrigin",
    "validate_template",
]
