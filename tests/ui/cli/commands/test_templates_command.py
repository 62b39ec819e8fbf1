"""Tests for the ``templates`` command."""

from __future__ import annotations

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from cargoscript.features.templates import TemplateRegistry
from cargoscript.ui.cli.args.options import TemplatesArgs
from cargoscript.ui.cli.commands import TemplatesCommand

PLAIN_TEMPLATE = "#{prelude}\nfn main() { #{script} }\n"


def _command(
    registry: TemplateRegistry, action: str, name: str | None = None, create: bool = False
) -> tuple[TemplatesCommand, StringIO]:
    output = StringIO()
    args = TemplatesArgs(command="templates", action=action, name=name, create=create)  # pyright: ignore[reportArgumentType]
    command = TemplatesCommand(args, registry=registry, console=Console(file=output, width=200))
    return command, output


def test_list_marks_overrides(tmp_path: Path) -> None:
    user_dir = tmp_path / "templates"
    user_dir.mkdir()
    _ = (user_dir / "expr.rs").write_text(PLAIN_TEMPLATE, encoding="utf-8")
    _ = (user_dir / "mine.rs").write_text(PLAIN_TEMPLATE, encoding="utf-8")
    command, output = _command(TemplateRegistry(user_dir), "list")

    assert command.execute() == 0

    rendered = output.getvalue()
    assert "user (overrides built-in)" in rendered
    assert "mine" in rendered
    assert "loop_count" in rendered
    assert "built-in" in rendered


def test_dump_writes_template_text(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    command, _ = _command(TemplateRegistry(tmp_path / "none"), "dump", name="expr")

    assert command.execute() == 0

    dumped = capsys.readouterr().out
    assert "#{script}" in dumped
    assert "#{prelude}" in dumped


def test_dir_create(tmp_path: Path) -> None:
    user_dir = tmp_path / "templates"
    command, output = _command(TemplateRegistry(user_dir), "dir", create=True)

    assert command.execute() == 0

    assert user_dir.is_dir()
    assert output.getvalue().strip() == str(user_dir)
