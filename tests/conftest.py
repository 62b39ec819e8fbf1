"""Shared pytest fixtures redirecting every cargoscript location to ``tmp_path``."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from cargoscript.config.config import Config
from cargoscript.config.paths import ENV_CACHE_DIR, ENV_CONFIG_PATH, ENV_TEMPLATE_DIR


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point XDG directories at a temporary home and reset the config singleton."""

    home = tmp_path / "home"
    for variable, folder in (
        ("XDG_CONFIG_HOME", "config"),
        ("XDG_CACHE_HOME", "cache"),
        ("XDG_DATA_HOME", "data"),
        ("XDG_STATE_HOME", "state"),
    ):
        monkeypatch.setenv(variable, str(home / folder))
    for variable in (ENV_CONFIG_PATH, ENV_CACHE_DIR, ENV_TEMPLATE_DIR):
        monkeypatch.delenv(variable, raising=False)

    Config.reset()
    yield home
    Config.reset()


@pytest.fixture
def make_executable() -> Callable[[Path], Path]:
    """Return a factory writing a small executable file at the given path."""

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        os.chmod(path, 0o755)
        return path

    return _make
