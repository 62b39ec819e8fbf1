"""Configuration management for cargoscript."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from cargoscript.config.file_ops import write_text_file
from cargoscript.config.paths import (
    ENV_CACHE_DIR,
    ENV_TEMPLATE_DIR,
    default_cache_dir,
    default_config_path,
    default_template_dir,
    resolve_overridable_path,
)
from cargoscript.platform.logging import logger
from cargoscript.shared.errors import Blame, CargoScriptError


class ConfigError(CargoScriptError):
    """Raised when the configuration file cannot be parsed."""

    blame = Blame.HUMAN
    exit_code = 2


def _path_field(default: Path | None = None) -> Any:
    """Create a field for Path objects with proper conversion.

    Args:
        default: Default value for the field.

    Returns:
        Field with proper metadata for path handling.
    """
    return field(default=default, metadata={"path": True})


@dataclass
class Config:
    """Application configuration."""

    # Root of the compiled-artifact cache
    cache_dir: Path | None = _path_field()

    # User template repository, searched before built-in templates
    template_dir: Path | None = _path_field()

    # Log file path
    log_file: Path | None = _path_field()

    # Toolchain commands
    cargo_command: str = "cargo"
    rustc_command: str = "rustc"

    # Edition written into generated manifests
    edition: str = "2021"

    _instance: ClassVar["Config | None"] = None
    _loaded_from: ClassVar[Path | None] = None

    def __post_init__(self) -> None:
        """Convert string paths to ``Path`` objects using field metadata."""

        for f in fields(self):
            if not f.metadata.get("path", False):
                continue
            value = getattr(self, f.name)
            if isinstance(value, str):
                setattr(self, f.name, Path(value).expanduser() if value.strip() else None)

    def resolved_cache_dir(self) -> Path:
        """Cache root: environment override, then config value, then platform default."""

        return resolve_overridable_path(
            explicit_path=None,
            env=None,
            env_var=ENV_CACHE_DIR,
            default_factory=lambda: self.cache_dir or default_cache_dir(),
        )

    def resolved_template_dir(self) -> Path:
        """User template repository with the same precedence as the cache root."""

        return resolve_overridable_path(
            explicit_path=None,
            env=None,
            env_var=ENV_TEMPLATE_DIR,
            default_factory=lambda: self.template_dir or default_template_dir(),
        )

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        config_dict = asdict(self)

        for key, value in config_dict.items():
            if isinstance(value, Path):
                config_dict[key] = str(value)

        target = path or default_config_path()
        try:
            write_text_file(target, self._render_toml(config_dict))
            logger.info("Configuration saved to %s", target)
        except OSError as e:
            logger.error("Failed to save configuration: %s", e)
            raise

    def _render_toml(self, config: dict[str, Any]) -> str:
        """Render configuration as TOML with inline guidance."""

        lines: list[str] = []

        lines.append("# cargoscript configuration file")
        lines.append("")

        lines.append("# Root directory of the compiled script cache (optional)")
        lines.append("# CARGOSCRIPT_CACHE_DIR takes precedence when set")
        lines.append('# Example: cache_dir = "/path/to/cache"')
        if config["cache_dir"] is not None:
            lines.append(f"cache_dir = {self._format_toml_value(config['cache_dir'])}")
        lines.append("")

        lines.append("# Directory holding user templates named <name>.rs (optional)")
        lines.append("# CARGOSCRIPT_TEMPLATE_DIR takes precedence when set")
        if config["template_dir"] is not None:
            lines.append(f"template_dir = {self._format_toml_value(config['template_dir'])}")
        lines.append("")

        lines.append("# Log file path (optional)")
        if config["log_file"] is not None:
            lines.append(f"log_file = {self._format_toml_value(config['log_file'])}")
        lines.append("")

        lines.append("# Toolchain commands")
        lines.append(f"cargo_command = {self._format_toml_value(config['cargo_command'])}")
        lines.append(f"rustc_command = {self._format_toml_value(config['rustc_command'])}")
        lines.append("")

        lines.append("# Rust edition used for generated packages")
        lines.append(f"edition = {self._format_toml_value(config['edition'])}")
        lines.append("")

        return "\n".join(lines)

    def _format_toml_value(self, value: Any) -> str:
        """Format a value for TOML serialization.

        Args:
            value: Value to format

        Returns:
            str: Formatted value
        """
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, Path)):
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration from file, creating a commented default when absent.

        Args:
            path: Explicit configuration file; defaults to ``default_config_path()``.

        Returns:
            Config: Loaded configuration object.

        Raises:
            ConfigError: If the file is not valid TOML or a value has the wrong type.
        """
        config_file = path or default_config_path()
        if cls._instance is not None and cls._loaded_from == config_file:
            return cls._instance

        if not config_file.exists():
            config = cls()
            try:
                config.save(config_file)
                logger.debug("Created default configuration at %s", config_file)
            except OSError:
                logger.warning("Continuing with built-in configuration defaults")
            cls._instance = config
            cls._loaded_from = config_file
            return config

        try:
            with open(config_file, "rb") as f:
                config_dict = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in configuration file {config_file}: {exc}") from exc

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        values: dict[str, Any] = {}
        for key in known & set(config_dict):
            value = config_dict[key]
            if not isinstance(value, str):
                raise ConfigError(f"Configuration value '{key}' must be a string")
            values[key] = value

        logger.debug("Configuration loaded from %s", config_file)
        instance = cls(**values)
        cls._instance = instance
        cls._loaded_from = config_file
        return instance

    @classmethod
    def reset(cls) -> None:
        """Forget the cached instance so the next ``load`` re-reads the file."""

        cls._instance = None
        cls._loaded_from = None


__all__ = ["Config", "ConfigError"]
