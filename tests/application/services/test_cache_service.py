"""Tests for the cache maintenance service."""

from __future__ import annotations

from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from cargoscript.application.services.cache_service import CacheMaintenanceService
from cargoscript.config.config import Config
from cargoscript.features.cache import GarbageReport


def test_root_honours_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARGOSCRIPT_CACHE_DIR", str(tmp_path / "env-cache"))

    service = CacheMaintenanceService(Config(cache_dir=tmp_path / "config-cache"))

    assert service.root == (tmp_path / "env-cache").resolve()


def test_operations_delegate_to_cache(tmp_path: Path, mocker: MockerFixture) -> None:
    factory = mocker.Mock()
    factory.return_value.clear.return_value = 2
    factory.return_value.collect_garbage.return_value = GarbageReport()
    service = CacheMaintenanceService(Config(cache_dir=tmp_path / "cache"), cache_factory=factory)

    assert service.clear() == 2
    assert service.collect_garbage() == GarbageReport()
    factory.assert_called_with((tmp_path / "cache").resolve())
