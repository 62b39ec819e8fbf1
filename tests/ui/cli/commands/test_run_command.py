"""Tests for the ``run`` command wiring."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

from pytest_mock import MockerFixture
from rich.console import Console

from cargoscript.application.services.run_service import ScriptRunResult
from cargoscript.features.cache import BuildMode
from cargoscript.features.package import InvocationMode
from cargoscript.ui.cli.args.options import RunArgs
from cargoscript.ui.cli.commands import RunCommand


def _args(**overrides: object) -> RunArgs:
    values: dict[str, object] = {
        "command": "run",
        "script_path": Path("hello.rs"),
        "code": None,
        "mode": InvocationMode.script(),
        "script_args": ("a",),
        "template_name": None,
        "dependencies": (),
        "unstable_features": (),
        "features": ("fast",),
        "build_mode": BuildMode.RUN,
        "release": True,
        "force": False,
        "build_only": False,
        "gen_pkg_only": False,
        "pkg_path": None,
        "verbose": False,
        "quiet": False,
    }
    values.update(overrides)
    return RunArgs(**values)  # pyright: ignore[reportArgumentType]


def _command(args: RunArgs, service: MagicMock) -> tuple[RunCommand, StringIO]:
    output = StringIO()
    console = Console(file=output, width=200)
    return RunCommand(args, service_factory=lambda: service, console=console), output


def test_request_carries_every_option() -> None:
    command = RunCommand(_args(force=True, release=False), service_factory=MagicMock)

    request = command.build_request()

    assert request.script_path == Path("hello.rs")
    assert request.args == ("a",)
    assert request.features == ("fast",)
    assert request.force is True
    assert request.release is False


def test_run_returns_program_status(mocker: MockerFixture) -> None:
    service = mocker.MagicMock()
    service.run.return_value = ScriptRunResult(
        exit_code=7, artifact_path=Path("/cache/bin"), fingerprint="f", cache_hit=True
    )
    command, output = _command(_args(), service)

    assert command.execute() == 7
    assert output.getvalue() == ""


def test_build_only_prints_artifact(mocker: MockerFixture) -> None:
    service = mocker.MagicMock()
    service.run.return_value = ScriptRunResult(
        exit_code=0, artifact_path=Path("/cache/bin/hello"), fingerprint="f", cache_hit=False
    )
    command, output = _command(_args(build_only=True), service)

    assert command.execute() == 0
    assert output.getvalue().strip() == "/cache/bin/hello"


def test_gen_pkg_only_skips_the_build(mocker: MockerFixture, tmp_path: Path) -> None:
    service = mocker.MagicMock()
    service.generate_package.return_value = tmp_path / "hello"
    command, output = _command(_args(gen_pkg_only=True, pkg_path=tmp_path / "hello"), service)

    assert command.execute() == 0

    service.run.assert_not_called()
    assert service.generate_package.call_args.args[1] == tmp_path / "hello"
    assert output.getvalue().strip() == str(tmp_path / "hello")
