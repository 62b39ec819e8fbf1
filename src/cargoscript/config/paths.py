"""Shared path utilities for configuration, cache and data locations.

This module centralizes how the application discovers locations for
config, cache and template files.

Policy (per-user, XDG style):
- Config: ``$XDG_CONFIG_HOME/cargoscript/config.toml`` unless overridden by
  ``CARGOSCRIPT_CONFIG``.
- Cache: ``$XDG_CACHE_HOME/cargoscript`` unless overridden by
  ``CARGOSCRIPT_CACHE_DIR``.
- Templates: ``$XDG_DATA_HOME/cargoscript/templates`` unless overridden by
  ``CARGOSCRIPT_TEMPLATE_DIR``.
- Logs: ``$XDG_STATE_HOME/cargoscript/cargoscript.log``.

On Windows the XDG variables fall back to ``%LOCALAPPDATA%`` and
``%APPDATA%``.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Final

APP_NAME: Final[str] = "cargoscript"

ENV_CONFIG_PATH: Final[str] = "CARGOSCRIPT_CONFIG"
ENV_CACHE_DIR: Final[str] = "CARGOSCRIPT_CACHE_DIR"
ENV_TEMPLATE_DIR: Final[str] = "CARGOSCRIPT_TEMPLATE_DIR"


def resolve_overridable_path(
    *,
    explicit_path: Path | str | None,
    env: Mapping[str, str] | None,
    env_var: str | None,
    default_factory: Callable[[], Path],
) -> Path:
    """Resolve a configuration path honoring explicit and environment overrides."""

    if explicit_path is not None:
        return Path(explicit_path).expanduser().resolve()

    mapping = env if env is not None else os.environ
    if env_var:
        candidate = mapping.get(env_var) or ""
        candidate = candidate.strip()
        if candidate:
            return Path(candidate).expanduser().resolve()

    default_path = default_factory()
    return default_path.expanduser().resolve()


def _base_dir(
    xdg_var: str,
    fallback: str,
    windows_var: str,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Return the per-user base directory for one XDG category.

    Args:
        xdg_var: XDG variable name, e.g. ``XDG_CACHE_HOME``.
        fallback: Path relative to the home directory used when unset.
        windows_var: Windows variable consulted before the home fallback.
        env: Optional environment mapping (defaults to ``os.environ``).

    Returns:
        Path: Base directory, not yet suffixed with the application name.
    """
    mapping = env if env is not None else os.environ
    value = (mapping.get(xdg_var) or "").strip()
    if value:
        return Path(value)
    if sys.platform == "win32":
        win_value = (mapping.get(windows_var) or "").strip()
        if win_value:
            return Path(win_value)
    return Path.home() / fallback


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the path to the main TOML config file."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_CONFIG_PATH,
        default_factory=lambda: _base_dir("XDG_CONFIG_HOME", ".config", "APPDATA", env)
        / APP_NAME
        / "config.toml",
    )


def default_cache_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the cache root holding one directory per logical script."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_CACHE_DIR,
        default_factory=lambda: _base_dir("XDG_CACHE_HOME", ".cache", "LOCALAPPDATA", env)
        / APP_NAME,
    )


def default_template_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the user-writable template repository."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_TEMPLATE_DIR,
        default_factory=lambda: _base_dir(
            "XDG_DATA_HOME", ".local/share", "LOCALAPPDATA", env
        )
        / APP_NAME
        / "templates",
    )


def default_log_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the default directory for log files."""

    base = _base_dir("XDG_STATE_HOME", ".local/state", "LOCALAPPDATA", env)
    return (base / APP_NAME).expanduser().resolve()


def default_log_file(env: Mapping[str, str] | None = None) -> Path:
    """Get the default log file path."""

    return (default_log_dir(env) / f"{APP_NAME}.log").resolve()


__all__ = [
    "APP_NAME",
    "ENV_CACHE_DIR",
    "ENV_CONFIG_PATH",
    "ENV_TEMPLATE_DIR",
    "default_cache_dir",
    "default_config_path",
    "default_log_dir",
    "default_log_file",
    "default_template_dir",
    "resolve_overridable_path",
]
