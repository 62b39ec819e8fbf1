"""Content-addressed store of compiled script artifacts.

Where: features/cache/usecases/artifact_cache.py
What: Decide hit/miss/stale per logical script, own package directories,
    record Ready builds and supersede old ones.
Why: Never serve a stale artifact while skipping every rebuild that is not needed.

Layout::

    <root>/<slot>/metadata.json         Ready record, replaced atomically
    <root>/<slot>/<fingerprint[:16]>/   Cargo.toml, main.rs, target/

No cross-process lock is taken. Two processes building the same fingerprint
write identical package files and the last ``commit`` wins, which is
harmless because the artifact is reproducible from the fingerprint.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import final

from cargoscript.config.settings import (
    MANIFEST_FILE_NAME,
    PACKAGE_DIR_DIGEST_LENGTH,
    SOURCE_FILE_NAME,
)
from cargoscript.features.cache.adapters.metadata_store import (
    JsonMetadataStore,
    MetadataRecord,
    MetadataStore,
)
from cargoscript.features.cache.domain.errors import BuildFailed, CacheUnavailable, CorruptMetadata
from cargoscript.features.cache.domain.models import (
    BuildFlags,
    BuildReservation,
    CacheEntry,
    CacheHit,
    CacheSlot,
    EntryStatus,
)
from cargoscript.features.package.domain.models import SynthesizedPackage
from cargoscript.config.file_ops import write_text_atomic
from cargoscript.platform.filesystem import (
    ensure_directory,
    is_executable_file,
    remove_tree_best_effort,
)
from cargoscript.platform.logging import logger


@dataclass(slots=True)
class GarbageReport:
    """Directories removed by ``collect_garbage``."""

    removed_slots: list[Path] = field(default_factory=list)
    removed_packages: list[Path] = field(default_factory=list)


@final
class ArtifactCache:
    """Persistent mapping from fingerprint to compiled artifact."""

    root: Path
    _store: MetadataStore

    def __init__(self, root: Path, *, store: MetadataStore | None = None) -> None:
        """Open the cache at ``root``, creating it when missing.

        Raises:
            CacheUnavailable: If ``root`` cannot be created or written.
        """
        self.root = root
        self._store = store or JsonMetadataStore()
        self._ensure_writable()

    # Lookup ------------------------------------------------------------------

    def slot_dir(self, slot: CacheSlot) -> Path:
        return self.root / slot.name

    def package_dir(self, slot: CacheSlot, fingerprint: str) -> Path:
        return self.slot_dir(slot) / fingerprint[:PACKAGE_DIR_DIGEST_LENGTH]

    def get(self, slot: CacheSlot, fingerprint: str) -> CacheEntry | None:
        """Return the Ready entry for exactly ``fingerprint``, or ``None``.

        The recorded artifact must still exist and be executable.
        """
        return self._classify(slot, fingerprint)[1]

    def status(self, slot: CacheSlot, fingerprint: str) -> EntryStatus:
        """Classify ``fingerprint`` against the slot's current record."""

        return self._classify(slot, fingerprint)[0]

    def lookup_or_reserve(
        self,
        slot: CacheSlot,
        fingerprint: str,
        flags: BuildFlags,
        *,
        force: bool = False,
    ) -> CacheHit | BuildReservation:
        """Return the Ready artifact, or a reservation describing what to build.

        ``force`` always yields a reservation, even when a matching entry exists.
        """
        extra = {
            "script": slot.name,
            "fingerprint": fingerprint,
            "profile": flags.profile,
        }
        status, entry = self._classify(slot, fingerprint)

        if entry is not None and not force:
            logger.info(
                "Using cached build for %s",
                slot.name,
                extra={**extra, "cache_event": "cache.hit", "location": str(entry.artifact_path)},
            )
            return CacheHit(entry=entry)

        if force:
            event = "cache.force"
        elif status is EntryStatus.STALE:
            event = "cache.stale"
        else:
            event = "cache.miss"
        if status is EntryStatus.BROKEN:
            logger.warning("A previous build of %s with this fingerprint failed", slot.name)

        package_dir = self.package_dir(slot, fingerprint)
        logger.info(
            "Build required for %s (%s)",
            slot.name,
            event,
            extra={**extra, "cache_event": event, "location": str(package_dir)},
        )
        return BuildReservation(
            slot=slot,
            fingerprint=fingerprint,
            package_dir=package_dir,
            flags=flags,
            previous=status,
        )

    # Materialization and commit ----------------------------------------------

    def materialize(self, reservation: BuildReservation, package: SynthesizedPackage) -> Path:
        """Write the package files into the reserved directory.

        Files whose content is already identical are left untouched so the
        build tool's own incremental state stays valid.
        """
        try:
            package_dir = ensure_directory(reservation.package_dir)
            for name, content in (
                (MANIFEST_FILE_NAME, package.manifest),
                (SOURCE_FILE_NAME, package.source),
            ):
                target = package_dir / name
                if target.is_file() and target.read_text(encoding="utf-8") == content:
                    continue
                write_text_atomic(target, content)
        except OSError as exc:
            raise CacheUnavailable(f"cannot write package into {reservation.package_dir}: {exc}") from exc
        return package_dir

    def commit(self, reservation: BuildReservation, artifact_path: Path) -> CacheEntry:
        """Record a finished build as the slot's Ready entry.

        The artifact is verified before any metadata is written. The previous
        Ready entry is superseded and its package directory removed
        best-effort.

        Raises:
            BuildFailed: If ``artifact_path`` is not an executable file inside
                the reserved package directory.
            CacheUnavailable: If the record cannot be written.
        """
        if not is_executable_file(artifact_path):
            raise BuildFailed(f"build reported success but produced no executable at {artifact_path}")
        # An artifact outside the package directory may be overwritten by another script's build.
        if not artifact_path.resolve().is_relative_to(reservation.package_dir.resolve()):
            raise BuildFailed(
                f"build produced {artifact_path} outside its package directory "
                f"{reservation.package_dir}"
            )

        slot_dir = self.slot_dir(reservation.slot)
        previous = self._read(reservation.slot)
        record = MetadataRecord(
            slot=reservation.slot.name,
            source=reservation.slot.source,
            fingerprint=reservation.fingerprint,
            package_dir=reservation.package_dir,
            artifact_path=artifact_path,
            flags=reservation.flags,
        )
        try:
            self._store.write(slot_dir, record)
        except OSError as exc:
            raise CacheUnavailable(f"cannot write cache metadata in {slot_dir}: {exc}") from exc

        logger.info(
            "Cached build for %s",
            reservation.slot.name,
            extra={
                "cache_event": "cache.commit",
                "script": reservation.slot.name,
                "fingerprint": reservation.fingerprint,
                "profile": reservation.flags.profile,
                "location": str(artifact_path),
            },
        )

        if (
            previous is not None
            and previous.package_dir is not None
            and previous.package_dir != reservation.package_dir
            and previous.package_dir.is_relative_to(slot_dir)
        ):
            _ = remove_tree_best_effort(previous.package_dir)

        return CacheEntry(
            fingerprint=reservation.fingerprint,
            package_dir=reservation.package_dir,
            artifact_path=artifact_path,
            flags=reservation.flags,
            status=EntryStatus.READY,
        )

    def mark_broken(self, reservation: BuildReservation, reason: str) -> None:
        """Remember that building ``reservation`` failed.

        The previous Ready entry, if any, is kept. Failing to persist the
        marker is logged and otherwise ignored.
        """
        previous = self._read(reservation.slot)
        base = previous or MetadataRecord(slot=reservation.slot.name, source=reservation.slot.source)
        record = replace(base, broken_fingerprint=reservation.fingerprint)
        try:
            self._store.write(self.slot_dir(reservation.slot), record)
        except OSError as exc:
            logger.warning("Failed to record broken build for %s: %s", reservation.slot.name, exc)
        logger.error(
            "Build of %s marked broken: %s",
            reservation.slot.name,
            reason,
            extra={
                "cache_event": "cache.broken",
                "script": reservation.slot.name,
                "fingerprint": reservation.fingerprint,
                "reason": reason,
            },
        )

    # Maintenance -----------------------------------------------------------------

    def collect_garbage(self) -> GarbageReport:
        """Remove slots whose source file is gone and orphaned package directories.

        Slots without a readable record are left alone because their owner
        cannot be determined.
        """
        report = GarbageReport()
        for slot_dir in sorted(self._slot_dirs()):
            try:
                record = self._store.read(slot_dir)
            except CorruptMetadata as exc:
                logger.warning("Skipping %s during garbage collection: %s", slot_dir, exc)
                continue
            if record is None:
                continue

            if record.source is not None and not record.source.exists():
                if remove_tree_best_effort(slot_dir):
                    report.removed_slots.append(slot_dir)
                continue

            for child in sorted(slot_dir.iterdir()):
                if not child.is_dir() or child == record.package_dir:
                    continue
                if remove_tree_best_effort(child):
                    report.removed_packages.append(child)

        logger.info(
            "Garbage collection removed %d slots and %d package directories",
            len(report.removed_slots),
            len(report.removed_packages),
        )
        return report

    def clear(self) -> int:
        """Delete every slot under the cache root; returns the number removed."""

        removed = 0
        for slot_dir in self._slot_dirs():
            if remove_tree_best_effort(slot_dir):
                removed += 1
        logger.info("Cleared %d cached scripts from %s", removed, self.root)
        return removed

    # Internals ---------------------------------------------------------------------

    def _classify(self, slot: CacheSlot, fingerprint: str) -> tuple[EntryStatus, CacheEntry | None]:
        record = self._read(slot)
        if record is None:
            return EntryStatus.ABSENT, None

        if record.fingerprint == fingerprint:
            assert record.package_dir is not None
            assert record.artifact_path is not None
            assert record.flags is not None
            if not is_executable_file(record.artifact_path):
                logger.debug("Recorded artifact is missing: %s", record.artifact_path)
                return EntryStatus.STALE, None
            entry = CacheEntry(
                fingerprint=fingerprint,
                package_dir=record.package_dir,
                artifact_path=record.artifact_path,
                flags=record.flags,
                status=EntryStatus.READY,
            )
            return EntryStatus.READY, entry

        if record.broken_fingerprint == fingerprint:
            return EntryStatus.BROKEN, None
        if record.has_ready_build:
            return EntryStatus.STALE, None
        return EntryStatus.ABSENT, None

    def _read(self, slot: CacheSlot) -> MetadataRecord | None:
        slot_dir = self.slot_dir(slot)
        try:
            record = self._store.read(slot_dir)
        except CorruptMetadata as exc:
            logger.warning(
                "Ignoring corrupted cache record for %s",
                slot.name,
                extra={"cache_event": "cache.corrupt", "script": slot.name, "reason": str(exc)},
            )
            return None
        if record is not None and record.slot != slot.name:
            logger.warning(
                "Ignoring corrupted cache record for %s",
                slot.name,
                extra={"cache_event": "cache.corrupt", "script": slot.name, "reason": "slot mismatch"},
            )
            return None
        return record

    def _slot_dirs(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return [child for child in self.root.iterdir() if child.is_dir()]

    def _ensure_writable(self) -> None:
        try:
            _ = ensure_directory(self.root)
            with tempfile.TemporaryFile(dir=self.root):
                pass
        except OSError as exc:
            raise CacheUnavailable(f"cache directory {self.root} is not writable: {exc}") from exc


__all__ = ["ArtifactCache", "GarbageReport"]
