"""src/cargoscript/application/services/cache_service.py
What: Expose cache maintenance operations to user interfaces.
Why: Keep cache-root resolution in one place for every UI command.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import final

from cargoscript.config.config import Config
from cargoscript.features.cache import ArtifactCache, GarbageReport


@final
class CacheMaintenanceService:
    """Clear or garbage-collect the artifact cache."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        cache_factory: Callable[[Path], ArtifactCache] | None = None,
    ) -> None:
        self._config = config or Config.load()
        self._cache_factory: Callable[[Path], ArtifactCache] = cache_factory or ArtifactCache

    @property
    def root(self) -> Path:
        return self._config.resolved_cache_dir()

    def clear(self) -> int:
        """Remove every cached script; returns the number of slots removed."""

        return self._cache_factory(self.root).clear()

    def collect_garbage(self) -> GarbageReport:
        """Remove slots of deleted scripts and unreferenced package directories."""

        return self._cache_factory(self.root).collect_garbage()


__all__ = ["CacheMaintenanceService"]
