"""JSON persistence for per-slot cache metadata.

Where: features/cache/adapters/metadata_store.py
What: Read and atomically write the small record describing a slot's Ready build.
Why: Readers in other processes must never observe a half-written record.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, final

from cargoscript.config.file_ops import write_text_atomic
from cargoscript.config.settings import METADATA_FILE_NAME, METADATA_FORMAT_VERSION
from cargoscript.features.cache.domain.errors import CorruptMetadata
from cargoscript.features.cache.domain.models import BuildFlags


@dataclass(slots=True, frozen=True)
class MetadataRecord:
    """Decoded contents of ``metadata.json``.

    The Ready fields (``fingerprint`` through ``flags``) are either all set
    or all ``None``; a slot whose only build failed has just
    ``broken_fingerprint``.
    """

    slot: str
    source: Path | None = None
    fingerprint: str | None = None
    package_dir: Path | None = None
    artifact_path: Path | None = None
    flags: BuildFlags | None = None
    broken_fingerprint: str | None = None

    @property
    def has_ready_build(self) -> bool:
        return self.fingerprint is not None


class MetadataStore(Protocol):
    """Port for slot metadata persistence."""

    def read(self, slot_dir: Path) -> MetadataRecord | None:
        """Return the record, ``None`` when absent; raise ``CorruptMetadata`` when unreadable."""
        ...

    def write(self, slot_dir: Path, record: MetadataRecord) -> None:
        """Persist ``record`` so concurrent readers see old or new, never partial."""
        ...


@final
class JsonMetadataStore:
    """Store records as ``<slot>/metadata.json``."""

    def read(self, slot_dir: Path) -> MetadataRecord | None:
        path = slot_dir / METADATA_FILE_NAME
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CorruptMetadata(f"cannot read {path}: {exc}") from exc

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptMetadata(f"invalid JSON in {path}: {exc}") from exc
        if not isinstance(document, dict):
            raise CorruptMetadata(f"{path} does not contain an object")
        return self._decode(slot_dir, document)

    def write(self, slot_dir: Path, record: MetadataRecord) -> None:
        document: dict[str, Any] = {
            "format": METADATA_FORMAT_VERSION,
            "slot": record.slot,
            "source": str(record.source) if record.source is not None else None,
            "status": "ready" if record.has_ready_build else "broken",
            "fingerprint": record.fingerprint,
            "package_dir": self._relative(slot_dir, record.package_dir),
            "artifact": self._relative(slot_dir, record.artifact_path),
            "flags": record.flags.to_dict() if record.flags is not None else None,
            "broken_fingerprint": record.broken_fingerprint,
        }
        write_text_atomic(
            slot_dir / METADATA_FILE_NAME,
            json.dumps(document, indent=2, sort_keys=True) + "\n",
        )

    def _decode(self, slot_dir: Path, document: dict[str, Any]) -> MetadataRecord:
        if document.get("format") != METADATA_FORMAT_VERSION:
            raise CorruptMetadata(f"unsupported metadata format {document.get('format')!r}")

        slot = document.get("slot")
        if not isinstance(slot, str):
            raise CorruptMetadata("missing slot name")

        source = self._optional_str(document, "source")
        fingerprint = self._optional_str(document, "fingerprint")
        package_dir = self._optional_str(document, "package_dir")
        artifact = self._optional_str(document, "artifact")
        broken = self._optional_str(document, "broken_fingerprint")
        flags_data = document.get("flags")

        ready_fields = (fingerprint, package_dir, artifact, flags_data)
        if any(value is None for value in ready_fields) and any(
            value is not None for value in ready_fields
        ):
            raise CorruptMetadata("incomplete ready entry")
        if flags_data is not None and not isinstance(flags_data, dict):
            raise CorruptMetadata("flags must be an object")

        return MetadataRecord(
            slot=slot,
            source=Path(source) if source is not None else None,
            fingerprint=fingerprint,
            package_dir=self._absolute(slot_dir, package_dir),
            artifact_path=self._absolute(slot_dir, artifact),
            flags=BuildFlags.from_dict(flags_data) if flags_data is not None else None,
            broken_fingerprint=broken,
        )

    @staticmethod
    def _optional_str(document: dict[str, Any], key: str) -> str | None:
        value = document.get(key)
        if value is not None and not isinstance(value, str):
            raise CorruptMetadata(f"'{key}' must be a string")
        return value

    @staticmethod
    def _relative(slot_dir: Path, path: Path | None) -> str | None:
        if path is None:
            return None
        if path.is_relative_to(slot_dir):
            return path.relative_to(slot_dir).as_posix()
        return str(path)

    @staticmethod
    def _absolute(slot_dir: Path, value: str | None) -> Path | None:
        if value is None:
            return None
        path = Path(value)
        return path if path.is_absolute() else slot_dir / path


__all__ = ["JsonMetadataStore", "MetadataRecord", "MetadataStore"]
