"""Tests for the ``cache`` command."""

from __future__ import annotations

from io import StringIO
from pathlib import Path

from pytest_mock import MockerFixture
from rich.console import Console

from cargoscript.features.cache import GarbageReport
from cargoscript.ui.cli.args.options import CacheArgs
from cargoscript.ui.cli.commands import CacheCommand


def test_clear_reports_count(mocker: MockerFixture) -> None:
    service = mocker.MagicMock()
    service.clear.return_value = 2
    service.root = Path("/cache")
    output = StringIO()

    status = CacheCommand(
        CacheArgs(command="cache", action="clear"),
        service=service,
        console=Console(file=output, width=200),
    ).execute()

    assert status == 0
    assert "Removed 2 cached scripts from /cache" in output.getvalue()


def test_gc_reports_removed_directories(mocker: MockerFixture) -> None:
    service = mocker.MagicMock()
    service.collect_garbage.return_value = GarbageReport(
        removed_slots=[Path("/c/a")], removed_packages=[Path("/c/b/p1"), Path("/c/b/p2")]
    )
    output = StringIO()

    _ = CacheCommand(
        CacheArgs(command="cache", action="gc"),
        service=service,
        console=Console(file=output, width=200),
    ).execute()

    assert "Removed 1 orphaned scripts and 2 superseded packages" in output.getvalue()
