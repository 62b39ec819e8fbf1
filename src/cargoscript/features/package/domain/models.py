"""Where: src/cargoscript/features/package/domain/models.py
What: Invocation modes, synthesis overrides and the synthesized package record.
Why: Give the synthesizer pure value types whose bytes define cache identity.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cargoscript.config.settings import (
    EXPRESSION_TEMPLATE,
    FILTER_COUNT_TEMPLATE,
    FILTER_TEMPLATE,
)
from cargoscript.features.manifest.domain.models import DependencySpec


class ModeKind(str, Enum):
    """Wrapping flavour applied to the script body."""

    SCRIPT = "script"
    EXPRESSION = "expression"
    FILTER = "filter"


@dataclass(slots=True, frozen=True)
class InvocationMode:
    """Tagged variant: ``Script``, ``Expression`` or ``Filter{count}``."""

    kind: ModeKind = ModeKind.SCRIPT
    count: bool = False

    def __post_init__(self) -> None:
        if self.count and self.kind is not ModeKind.FILTER:
            raise ValueError("line counting only applies to filter mode")

    @classmethod
    def script(cls) -> "InvocationMode":
        return cls(ModeKind.SCRIPT)

    @classmethod
    def expression(cls) -> "InvocationMode":
        return cls(ModeKind.EXPRESSION)

    @classmethod
    def filter(cls, *, count: bool = False) -> "InvocationMode":
        return cls(ModeKind.FILTER, count=count)

    @property
    def default_template_name(self) -> str | None:
        """Built-in template for this mode; ``None`` means the body is used as-is."""

        if self.kind is ModeKind.EXPRESSION:
            return EXPRESSION_TEMPLATE
        if self.kind is ModeKind.FILTER:
            return FILTER_COUNT_TEMPLATE if self.count else FILTER_TEMPLATE
        return None


@dataclass(slots=True, frozen=True)
class PackageOverrides:
    """Caller-supplied additions layered over the script's own manifest.

    Attributes:
        dependencies: Extra dependencies, e.g. from ``--dep``.
        unstable_features: Names emitted as ``#![feature(...)]`` lines.
        manifest: Raw manifest table merged last; wins on key conflicts.
        edition: Rust edition for the generated ``[package]`` table.
    """

    dependencies: tuple[DependencySpec, ...] = ()
    unstable_features: tuple[str, ...] = ()
    manifest: Mapping[str, Any] | None = None
    edition: str = "2021"


@dataclass(slots=True, frozen=True)
class SynthesizedPackage:
    """Generated manifest and source text for one script revision."""

    name: str
    manifest: str
    source: str

    @property
    def identity(self) -> str:
        """Content hash of the package bytes alone."""

        digest = hashlib.sha256()
        for part in (self.manifest, self.source):
            data = part.encode("utf-8")
            digest.update(len(data).to_bytes(8, "big"))
            digest.update(data)
        return digest.hexdigest()


__all__ = ["InvocationMode", "ModeKind", "PackageOverrides", "SynthesizedPackage"]
