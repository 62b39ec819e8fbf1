"""Tests for loading and saving the TOML configuration file."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargoscript.config.config import Config, ConfigError
from cargoscript.config.paths import ENV_CACHE_DIR, ENV_TEMPLATE_DIR, default_config_path


def test_missing_file_creates_commented_default() -> None:
    config = Config.load()

    config_file = default_config_path()
    assert config_file.exists()
    content = config_file.read_text(encoding="utf-8")
    assert content.startswith("# cargoscript configuration file")
    assert 'cargo_command = "cargo"' in content
    assert config.edition == "2021"
    assert config.cache_dir is None


def test_load_is_cached_until_reset(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    _ = config_file.write_text('edition = "2018"\n', encoding="utf-8")

    first = Config.load(config_file)
    assert Config.load(config_file) is first

    _ = config_file.write_text('edition = "2024"\n', encoding="utf-8")
    Config.reset()
    assert Config.load(config_file).edition == "2024"


def test_save_then_load_round_trips_values(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    original = Config(
        cache_dir=tmp_path / "cache",
        template_dir=tmp_path / 'tem"plates',
        cargo_command="/opt/rust/bin/cargo",
        edition="2024",
    )
    original.save(config_file)

    loaded = Config.load(config_file)

    assert loaded.cache_dir == tmp_path / "cache"
    assert loaded.template_dir == tmp_path / 'tem"plates'
    assert loaded.log_file is None
    assert loaded.cargo_command == "/opt/rust/bin/cargo"
    assert loaded.rustc_command == "rustc"
    assert loaded.edition == "2024"


def test_invalid_toml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    _ = config_file.write_text("edition = \n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        _ = Config.load(config_file)


def test_non_string_value_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    _ = config_file.write_text("edition = 2021\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="'edition' must be a string"):
        _ = Config.load(config_file)


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    _ = config_file.write_text('colour = "blue"\nrustc_command = "rustc-nightly"\n', encoding="utf-8")

    assert Config.load(config_file).rustc_command == "rustc-nightly"


def test_environment_overrides_configured_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = Config(cache_dir=tmp_path / "configured", template_dir=tmp_path / "tpl")
    assert config.resolved_cache_dir() == (tmp_path / "configured").resolve()

    monkeypatch.setenv(ENV_CACHE_DIR, str(tmp_path / "from-env"))
    monkeypatch.setenv(ENV_TEMPLATE_DIR, str(tmp_path / "tpl-env"))

    assert config.resolved_cache_dir() == (tmp_path / "from-env").resolve()
    assert config.resolved_template_dir() == (tmp_path / "tpl-env").resolve()


def test_blank_path_strings_mean_unset() -> None:
    config = Config(cache_dir="  ")  # pyright: ignore[reportArgumentType]

    assert config.cache_dir is None
