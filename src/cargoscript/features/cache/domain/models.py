"""Data structures describing cache slots, build flags and cache entries."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from cargoscript.features.package.usecases.naming import slot_name
from cargoscript.shared.script_source import ScriptSource

from .errors import CorruptMetadata


class BuildMode(str, Enum):
    """Which cargo command produces the artifact."""

    RUN = "run"
    TEST = "test"
    BENCH = "bench"


class EntryStatus(str, Enum):
    """Lifecycle state of a logical script's cache slot for one fingerprint."""

    ABSENT = "absent"
    BUILDING = "building"
    READY = "ready"
    STALE = "stale"
    BROKEN = "broken"


@dataclass(slots=True, frozen=True)
class BuildFlags:
    """Every build input outside the package bytes that changes the artifact.

    Feature names are sorted and de-duplicated on construction because cargo
    treats the feature list as a set.
    """

    release: bool = True
    features: tuple[str, ...] = ()
    mode: BuildMode = BuildMode.RUN
    toolchain: str = ""

    def __post_init__(self) -> None:
        normalized = tuple(sorted({name.strip() for name in self.features if name.strip()}))
        object.__setattr__(self, "features", normalized)

    @property
    def profile(self) -> str:
        return "release" if self.release else "debug"

    def to_dict(self) -> dict[str, Any]:
        return {
            "release": self.release,
            "features": list(self.features),
            "mode": self.mode.value,
            "toolchain": self.toolchain,
        }

    def canonical(self) -> str:
        """Stable text encoding used in fingerprints."""

        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildFlags":
        try:
            release = data["release"]
            features = data["features"]
            toolchain = data["toolchain"]
            mode = BuildMode(data["mode"])
        except (KeyError, ValueError, TypeError) as exc:
            raise CorruptMetadata(f"invalid build flags: {exc}") from exc
        if not isinstance(release, bool) or not isinstance(toolchain, str):
            raise CorruptMetadata("invalid build flag types")
        if not isinstance(features, list) or not all(isinstance(f, str) for f in features):
            raise CorruptMetadata("features must be a list of strings")
        return cls(release=release, features=tuple(features), mode=mode, toolchain=toolchain)


@dataclass(slots=True, frozen=True)
class CacheSlot:
    """One logical script's directory under the cache root."""

    name: str
    source: Path | None = None

    @classmethod
    def for_script(cls, script: ScriptSource) -> "CacheSlot":
        return cls(name=slot_name(script), source=script.origin)


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """A fingerprint together with the package and artifact built from it."""

    fingerprint: str
    package_dir: Path
    artifact_path: Path
    flags: BuildFlags
    status: EntryStatus = EntryStatus.READY


@dataclass(slots=True, frozen=True)
class CacheHit:
    """Lookup result: a verified Ready artifact."""

    entry: CacheEntry

    @property
    def artifact_path(self) -> Path:
        return self.entry.artifact_path


@dataclass(slots=True, frozen=True)
class BuildReservation:
    """Lookup result: the caller must build into ``package_dir`` and commit."""

    slot: CacheSlot
    fingerprint: str
    package_dir: Path
    flags: BuildFlags
    previous: EntryStatus = EntryStatus.ABSENT
    status: EntryStatus = field(default=EntryStatus.BUILDING)


__all__ = [
    "BuildFlags",
    "BuildMode",
    "BuildReservation",
    "CacheEntry",
    "CacheHit",
    "CacheSlot",
    "EntryStatus",
]
