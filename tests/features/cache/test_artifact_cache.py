"""Tests for the artifact cache state machine and persistence."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from cargoscript.features.cache import (
    ArtifactCache,
    BuildFailed,
    BuildFlags,
    BuildReservation,
    CacheHit,
    CacheSlot,
    CacheUnavailable,
    EntryStatus,
)
from cargoscript.features.package import SynthesizedPackage

FLAGS = BuildFlags(toolchain="rustc 1.80.0")
FP_ONE = "1" * 64
FP_TWO = "2" * 64

MakeExecutable = Callable[[Path], Path]


@pytest.fixture
def cache(tmp_path: Path) -> ArtifactCache:
    return ArtifactCache(tmp_path / "cache")


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "scripts" / "demo.rs"
    path.parent.mkdir(parents=True)
    _ = path.write_text("fn main() {}\n", encoding="utf-8")
    return path


@pytest.fixture
def slot(source_file: Path) -> CacheSlot:
    return CacheSlot(name="demo-0123456789abcdef", source=source_file)


def _reserve(cache: ArtifactCache, slot: CacheSlot, fingerprint: str, *, force: bool = False) -> BuildReservation:
    outcome = cache.lookup_or_reserve(slot, fingerprint, FLAGS, force=force)
    assert isinstance(outcome, BuildReservation)
    return outcome


def _build(
    cache: ArtifactCache,
    slot: CacheSlot,
    fingerprint: str,
    make_executable: MakeExecutable,
) -> Path:
    reservation = _reserve(cache, slot, fingerprint)
    artifact = make_executable(reservation.package_dir / "target" / "release" / "demo")
    _ = cache.commit(reservation, artifact)
    return artifact


def test_first_lookup_reserves_a_build(cache: ArtifactCache, slot: CacheSlot) -> None:
    reservation = _reserve(cache, slot, FP_ONE)

    assert reservation.previous is EntryStatus.ABSENT
    assert reservation.status is EntryStatus.BUILDING
    assert reservation.package_dir == cache.root / slot.name / FP_ONE[:16]
    assert not reservation.package_dir.exists()


def test_get_after_commit_returns_artifact(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    artifact = _build(cache, slot, FP_ONE, make_executable)

    entry = cache.get(slot, FP_ONE)
    assert entry is not None
    assert entry.artifact_path == artifact
    assert entry.status is EntryStatus.READY
    assert entry.flags == FLAGS

    outcome = cache.lookup_or_reserve(slot, FP_ONE, FLAGS)
    assert isinstance(outcome, CacheHit)
    assert outcome.artifact_path == artifact


def test_hit_survives_reopening_the_cache(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    artifact = _build(cache, slot, FP_ONE, make_executable)

    reopened = ArtifactCache(cache.root)

    entry = reopened.get(slot, FP_ONE)
    assert entry is not None
    assert entry.artifact_path == artifact


def test_different_fingerprint_is_stale_miss(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)

    assert cache.get(slot, FP_TWO) is None
    assert cache.status(slot, FP_TWO) is EntryStatus.STALE
    reservation = _reserve(cache, slot, FP_TWO)
    assert reservation.previous is EntryStatus.STALE


def test_force_always_reserves(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)

    reservation = _reserve(cache, slot, FP_ONE, force=True)

    assert reservation.previous is EntryStatus.READY


def test_missing_artifact_is_a_miss(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    artifact = _build(cache, slot, FP_ONE, make_executable)
    artifact.unlink()

    assert cache.get(slot, FP_ONE) is None
    assert cache.status(slot, FP_ONE) is EntryStatus.STALE


def test_non_executable_artifact_is_a_miss(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    artifact = _build(cache, slot, FP_ONE, make_executable)
    artifact.chmod(0o644)

    assert cache.get(slot, FP_ONE) is None


def test_commit_rejects_missing_artifact(cache: ArtifactCache, slot: CacheSlot) -> None:
    """Metadata is only written once the artifact is verified present."""

    reservation = _reserve(cache, slot, FP_ONE)

    with pytest.raises(BuildFailed):
        _ = cache.commit(reservation, reservation.package_dir / "missing")

    assert not (cache.root / slot.name / "metadata.json").exists()
    assert cache.status(slot, FP_ONE) is EntryStatus.ABSENT


def test_commit_rejects_artifact_outside_package_dir(
    cache: ArtifactCache, slot: CacheSlot, tmp_path: Path, make_executable: MakeExecutable
) -> None:
    """A shared target directory must never become a Ready artifact."""

    reservation = _reserve(cache, slot, FP_ONE)
    shared = make_executable(tmp_path / "shared-target" / "release" / "demo")

    with pytest.raises(BuildFailed, match="outside its package directory"):
        _ = cache.commit(reservation, shared)

    assert cache.get(slot, FP_ONE) is None


def test_same_named_scripts_never_share_an_artifact(
    cache: ArtifactCache, tmp_path: Path, make_executable: MakeExecutable
) -> None:
    first = CacheSlot(name="tool-aaaaaaaaaaaaaaaa", source=tmp_path / "a" / "tool.rs")
    second = CacheSlot(name="tool-bbbbbbbbbbbbbbbb", source=tmp_path / "b" / "tool.rs")

    first_artifact = _build(cache, first, FP_ONE, make_executable)
    second_artifact = _build(cache, second, FP_TWO, make_executable)

    first_entry = cache.get(first, FP_ONE)
    assert first_entry is not None
    assert first_entry.artifact_path == first_artifact
    assert first_artifact != second_artifact


def test_commit_supersedes_previous_package(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    first_artifact = _build(cache, slot, FP_ONE, make_executable)
    first_package = cache.package_dir(slot, FP_ONE)
    assert first_artifact.exists()

    second_artifact = _build(cache, slot, FP_TWO, make_executable)

    assert not first_package.exists()
    assert cache.get(slot, FP_ONE) is None
    entry = cache.get(slot, FP_TWO)
    assert entry is not None
    assert entry.artifact_path == second_artifact


def test_metadata_paths_are_stored_relative(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)

    document = json.loads((cache.root / slot.name / "metadata.json").read_text(encoding="utf-8"))

    assert document["format"] == 1
    assert document["status"] == "ready"
    assert document["fingerprint"] == FP_ONE
    assert document["package_dir"] == FP_ONE[:16]
    assert document["artifact"] == f"{FP_ONE[:16]}/target/release/demo"


@pytest.mark.parametrize(
    "content",
    ["{not json", "[]", '{"format": 99, "slot": "demo-0123456789abcdef"}', '{"format": 1}'],
)
def test_corrupt_metadata_degrades_to_absent(
    cache: ArtifactCache,
    slot: CacheSlot,
    make_executable: MakeExecutable,
    content: str,
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)
    _ = (cache.root / slot.name / "metadata.json").write_text(content, encoding="utf-8")

    assert cache.get(slot, FP_ONE) is None
    reservation = _reserve(cache, slot, FP_ONE)
    assert reservation.previous is EntryStatus.ABSENT


def test_corrupt_metadata_is_logged(
    cache: ArtifactCache, slot: CacheSlot, mocker: MockerFixture
) -> None:
    slot_dir = cache.slot_dir(slot)
    slot_dir.mkdir(parents=True)
    _ = (slot_dir / "metadata.json").write_text("{not json", encoding="utf-8")
    mock_logger = mocker.patch("cargoscript.features.cache.usecases.artifact_cache.logger")

    assert cache.get(slot, FP_ONE) is None

    mock_logger.warning.assert_called_once()
    assert mock_logger.warning.call_args.kwargs["extra"]["cache_event"] == "cache.corrupt"


def test_mark_broken_keeps_previous_ready_entry(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    artifact = _build(cache, slot, FP_ONE, make_executable)

    reservation = _reserve(cache, slot, FP_TWO)
    cache.mark_broken(reservation, "cargo exited with status 101")

    assert cache.status(slot, FP_TWO) is EntryStatus.BROKEN
    entry = cache.get(slot, FP_ONE)
    assert entry is not None
    assert entry.artifact_path == artifact


def test_broken_fingerprint_is_rebuilt_when_asked_again(cache: ArtifactCache, slot: CacheSlot) -> None:
    reservation = _reserve(cache, slot, FP_ONE)
    cache.mark_broken(reservation, "failed")

    again = _reserve(cache, slot, FP_ONE)

    assert again.previous is EntryStatus.BROKEN


def test_unwritable_root_fails_fast(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    _ = blocker.write_text("", encoding="utf-8")

    with pytest.raises(CacheUnavailable):
        _ = ArtifactCache(blocker)


def test_materialize_writes_package_files(cache: ArtifactCache, slot: CacheSlot) -> None:
    package = SynthesizedPackage(name="demo", manifest="[package]\nname = \"demo\"\n", source="fn main() {}\n")
    reservation = _reserve(cache, slot, FP_ONE)

    package_dir = cache.materialize(reservation, package)
    manifest = package_dir / "Cargo.toml"
    mtime = manifest.stat().st_mtime_ns
    _ = cache.materialize(reservation, package)

    assert manifest.read_text(encoding="utf-8") == package.manifest
    assert (package_dir / "main.rs").read_text(encoding="utf-8") == package.source
    assert manifest.stat().st_mtime_ns == mtime


def test_collect_garbage_removes_deleted_scripts_and_orphans(
    cache: ArtifactCache,
    slot: CacheSlot,
    source_file: Path,
    tmp_path: Path,
    make_executable: MakeExecutable,
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)
    orphan = cache.slot_dir(slot) / "orphaned-package"
    orphan.mkdir()

    gone_source = tmp_path / "gone.rs"
    _ = gone_source.write_text("fn main() {}", encoding="utf-8")
    gone_slot = CacheSlot(name="gone-fedcba9876543210", source=gone_source)
    _ = _build(cache, gone_slot, FP_TWO, make_executable)
    gone_source.unlink()

    report = cache.collect_garbage()

    assert report.removed_slots == [cache.slot_dir(gone_slot)]
    assert report.removed_packages == [orphan]
    assert cache.get(slot, FP_ONE) is not None
    assert source_file.exists()


def test_clear_removes_every_slot(
    cache: ArtifactCache, slot: CacheSlot, make_executable: MakeExecutable
) -> None:
    _ = _build(cache, slot, FP_ONE, make_executable)

    assert cache.clear() == 1
    assert cache.get(slot, FP_ONE) is None
    assert list(cache.root.iterdir()) == []
