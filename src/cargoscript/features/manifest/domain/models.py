"""Data structures describing dependencies declared inside a script."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

from .errors import MalformedManifest

WILDCARD_VERSION: Final[str] = "*"


class ManifestFormat(str, Enum):
    """Which embedded syntax supplied the manifest."""

    SHORT_FORM = "short-form"
    FENCED = "fenced"
    ABSENT = "absent"


@dataclass(slots=True, frozen=True)
class DependencySpec:
    """One dependency: crate name, version requirement and optional alias."""

    name: str
    version: str = WILDCARD_VERSION
    alias: str | None = None

    @property
    def key(self) -> str:
        """Name the dependency is known by inside the generated manifest."""

        return self.alias or self.name

    def manifest_value(self) -> str | dict[str, str]:
        """Value written under ``[dependencies]`` for this spec."""

        if self.alias is None:
            return self.version
        return {"package": self.name, "version": self.version}


@dataclass(slots=True, frozen=True)
class ManifestDeclaration:
    """Ordered dependency specs plus an optional raw manifest fragment."""

    dependencies: tuple[DependencySpec, ...] = ()
    fragment: Mapping[str, Any] | None = field(default=None, compare=True)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for spec in self.dependencies:
            if spec.key in seen:
                raise MalformedManifest(f"duplicate dependency '{spec.key}'")
            seen.add(spec.key)

    @property
    def is_empty(self) -> bool:
        return not self.dependencies and not self.fragment


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Outcome of manifest extraction: the declaration and the remaining body."""

    declaration: ManifestDeclaration
    body: str
    format: ManifestFormat = ManifestFormat.ABSENT

    def __iter__(self) -> Iterator[ManifestDeclaration | str]:
        yield self.declaration
        yield self.body


__all__ = [
    "DependencySpec",
    "ExtractionResult",
    "ManifestDeclaration",
    "ManifestFormat",
    "WILDCARD_VERSION",
]
