"""Rich console handler that renders cache and build events.

Where: platform/logging/handlers.py
What: Style structured ``cache_event`` records with icons, colours and compact paths.
Why: Keep event formatting out of the feature layers that emit them.
"""

from __future__ import annotations

import logging
import sys
from pathlib import PurePath, PurePosixPath, PureWindowsPath
from typing import Any, ClassVar

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

from rich.console import ConsoleRenderable
from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text


class CacheEventRichHandler(RichHandler):
    """Rich handler that displays cache events with dedicated styling."""

    _EVENT_STYLES: ClassVar[dict[str, tuple[str, str, str]]] = {
        "cache.hit": ("♻️", "green", "Using cached build"),
        "cache.miss": ("🔨", "cyan", "No cached build"),
        "cache.stale": ("⏳", "yellow", "Cached build is stale"),
        "cache.force": ("🔁", "yellow", "Forced rebuild"),
        "cache.commit": ("✅", "green", "Cached build"),
        "cache.corrupt": ("⚠️", "yellow", "Ignoring corrupted cache record"),
        "cache.broken": ("❌", "red", "Build marked broken"),
        "build.start": ("🚀", "blue", "Building"),
        "build.failed": ("⛔", "red", "Build failed"),
    }
    _PATH_SEGMENT_LIMIT: ClassVar[int] = 4
    _FINGERPRINT_DISPLAY: ClassVar[int] = 12

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Initialize the handler with compact defaults.

        Args:
            *args: Positional arguments to pass to RichHandler.
            **kwargs: Keyword arguments to pass to RichHandler.
        """
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["show_level"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = False
        kwargs["omit_repeated_times"] = False
        super().__init__(*args, **kwargs)

    def _format_path(self, path: str) -> Text:
        """Format a path with coloured separators and ellipsis truncation."""

        pure_path = self._to_pure_path(path)
        separator = "\\" if isinstance(pure_path, PureWindowsPath) else "/"
        anchor = pure_path.anchor
        body_parts = [part for part in pure_path.parts if part and part != anchor]

        truncated = len(body_parts) > self._PATH_SEGMENT_LIMIT
        if truncated:
            body_parts = body_parts[-self._PATH_SEGMENT_LIMIT:]

        display_string = ""
        if truncated:
            display_string = "…" + separator
        elif anchor:
            display_string = anchor if anchor.endswith(separator) else anchor + separator
        display_string += separator.join(body_parts)
        if not display_string:
            display_string = "."

        text = Text()
        for char in display_string:
            if char == separator or char == "…":
                _ = text.append(char, style=Style(color="magenta"))
            else:
                _ = text.append(char, style=Style(color="white"))
        return text

    @staticmethod
    def _to_pure_path(raw_path: str) -> PurePath:
        """Return a platform-aware ``PurePath`` for the given raw string."""

        if "\\" in raw_path:
            return PureWindowsPath(raw_path)
        return PurePosixPath(raw_path)

    def _render_cache_event(self, record: logging.LogRecord, message: str) -> Text | None:
        """Render a structured cache event, or ``None`` for ordinary records."""

        event = getattr(record, "cache_event", None)
        if not isinstance(event, str):
            return None

        icon, color, label = self._EVENT_STYLES.get(event, ("ℹ️", "blue", message))
        text = Text()
        _ = text.append(f"{icon} ", style=Style(color=color, bold=True))

        body = Text(style=Style(color=color))
        _ = body.append(label)

        script = getattr(record, "script", None)
        if script:
            _ = body.append(f" {script}")

        details: list[str] = []
        fingerprint = getattr(record, "fingerprint", None)
        if isinstance(fingerprint, str) and fingerprint:
            details.append(fingerprint[: self._FINGERPRINT_DISPLAY])
        profile = getattr(record, "profile", None)
        if isinstance(profile, str) and profile:
            details.append(profile)
        reason = getattr(record, "reason", None)
        if reason:
            details.append(str(reason))
        if details:
            _ = body.append(" [" + ", ".join(details) + "]")

        location = getattr(record, "location", None)
        if location:
            _ = body.append(" @ ")
            _ = body.append_text(self._format_path(str(location)))

        _ = text.append_text(body)
        return text

    @override
    def render_message(self, record: logging.LogRecord, message: str) -> ConsoleRenderable:
        """Render message with custom styling for cache events."""

        event_text = self._render_cache_event(record, message)
        if event_text is not None:
            return event_text
        return super().render_message(record, message)


__all__ = ["CacheEventRichHandler"]
