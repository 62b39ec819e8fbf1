# Path: `src/cargoscript/features/cache/__init__.py`
# Summary: Export cache key derivation and artifact cache symbols.
# Why: Provide a stable import surface for services and tests.

from .adapters.metadata_store import JsonMetadataStore, MetadataRecord, MetadataStore
from .domain.errors import BuildFailed, CacheUnavailable, CorruptMetadata, ToolchainUnavailable
from .domain.models import (
    BuildFlags,
    BuildMode,
    BuildReservation,
    CacheEntry,
    CacheHit,
    CacheSlot,
    EntryStatus,
)
from .usecases.artifact_cache import ArtifactCache, GarbageReport
from .usecases.fingerprint import FINGERPRINT_VERSION, derive_fingerprint
from .usecases.ports import BuildPort, ExecutionPort, ToolchainPort

__all__ = [
    "ArtifactCache",
    "BuildFailed",
    "BuildPort",
    "BuildFlags",
    "BuildMode",
    "BuildReservation",
    "CacheEntry",
    "CacheHit",
    "CacheSlot",
    "CacheUnavailable",
    "CorruptMetadata",
    "EntryStatus",
    "ExecutionPort",
    "FINGERPRINT_VERSION",
    "GarbageReport",
    "JsonMetadataStore",
    "MetadataRecord",
    "MetadataStore",
    "ToolchainPort",
    "ToolchainUnavailable",
    "derive_fingerprint",
]
