"""Logger configuration bootstrap.

Where: platform/logging/config.py
What: Build the stderr console handler, the optional rotating log file and the shared logger.
Why: Compiled scripts own stdout, so every diagnostic must stay on stderr or in the file.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Final

from rich.console import Console

from cargoscript.config.paths import default_log_file

from .handlers import CacheEventRichHandler


DEFAULT_LOG_FILE: Final[Path] = default_log_file()
LOGGER_NAME: Final[str] = "cargoscript"

_FILE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_MAX_LOG_BYTES: Final[int] = 10 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 5


def _console_handler(level: int) -> logging.Handler:
    handler = CacheEventRichHandler(console=Console(stderr=True, soft_wrap=True))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    target = log_file.expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        target,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def setup_logger(
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """(Re)configure the ``cargoscript`` logger.

    Existing handlers are closed and replaced, so the CLI can call this again
    once verbosity flags and the configured log file are known.

    Args:
        log_file: Rotating log file; ``None`` keeps logging console-only.
        console_level: Threshold for the stderr handler.
        file_level: Threshold for the file handler.

    Returns:
        logging.Logger: The configured application logger.
    """
    configured = logging.getLogger(LOGGER_NAME)
    configured.setLevel(logging.DEBUG)
    configured.propagate = False

    for handler in list(configured.handlers):
        handler.close()
    configured.handlers.clear()

    configured.addHandler(_console_handler(console_level))
    if log_file is not None:
        configured.addHandler(_file_handler(Path(log_file), file_level))

    return configured


# Console-only until the CLI knows where the log file lives.
logger: Final[logging.Logger] = setup_logger()


__all__ = ["DEFAULT_LOG_FILE", "LOGGER_NAME", "setup_logger", "logger"]
