"""src/cargoscript/ui/cli/commands/templates.py
What: List, print and locate templates.
Why: Let users see which templates exist and which built-ins they override.
"""

from __future__ import annotations

import sys
from typing import final

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from cargoscript.config.config import Config
from cargoscript.features.templates import TemplateInfo, TemplateOrigin, TemplateRegistry
from cargoscript.ui.cli.args.options import TemplatesArgs


@final
class TemplatesCommand:
    """Render template information with Rich."""

    def __init__(
        self,
        args: TemplatesArgs,
        *,
        registry: TemplateRegistry | None = None,
        console: Console | None = None,
    ) -> None:
        self._args = args
        self._registry = registry or TemplateRegistry(Config.load().resolved_template_dir())
        self._console = console or Console()

    def execute(self) -> int:
        if self._args.action == "list":
            self._console.print(self._build_table(self._registry.list_templates()))
            return 0

        if self._args.action == "dump":
            assert self._args.name is not None
            template = self._registry.load(self._args.name)
            _ = sys.stdout.write(template.text)
            return 0

        directory = (
            self._registry.ensure_user_dir() if self._args.create else self._registry.user_dir
        )
        self._console.print(str(directory), markup=False, highlight=False, soft_wrap=True)
        return 0

    def _build_table(self, entries: list[TemplateInfo]) -> Table:
        table = Table(
            title="Templates",
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE_HEAD,
        )
        table.add_column("Name", style="bold")
        table.add_column("Origin")
        table.add_column("Path", style="dim")

        for entry in entries:
            table.add_row(entry.name, self._format_origin(entry), str(entry.path or "-"))
        return table

    @staticmethod
    def _format_origin(entry: TemplateInfo) -> Text:
        if entry.origin is TemplateOrigin.BUILTIN:
            return Text("built-in", style="cyan")
        if entry.overrides_builtin:
            return Text("user (overrides built-in)", style="yellow")
        return Text("user", style="green")
