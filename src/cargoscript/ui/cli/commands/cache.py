"""Cache maintenance command implementation for the CLI."""

from __future__ import annotations

from typing import final

from rich.console import Console

from cargoscript.application.services.cache_service import CacheMaintenanceService
from cargoscript.ui.cli.args.options import CacheArgs


@final
class CacheCommand:
    """Clear or garbage-collect the artifact cache."""

    def __init__(
        self,
        args: CacheArgs,
        *,
        service: CacheMaintenanceService | None = None,
        console: Console | None = None,
    ) -> None:
        self.args = args
        self.service = service or CacheMaintenanceService()
        self._console = console or Console()

    def execute(self) -> int:
        if self.args.action == "clear":
            removed = self.service.clear()
            self._console.print(f"Removed [bold]{removed}[/bold] cached scripts from {self.service.root}")
            return 0

        report = self.service.collect_garbage()
        self._console.print(
            f"Removed [bold]{len(report.removed_slots)}[/bold] orphaned scripts and "
            f"[bold]{len(report.removed_packages)}[/bold] superseded packages"
        )
        return 0
