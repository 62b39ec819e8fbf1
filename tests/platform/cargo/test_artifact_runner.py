"""Tests for executing compiled artifacts."""

from __future__ import annotations

import subprocess
from pathlib import Path

from pytest_mock import MockerFixture

from cargoscript.features.cache import BuildMode
from cargoscript.platform.cargo import ArtifactRunner


def test_run_passes_arguments_and_status(mocker: MockerFixture) -> None:
    run = mocker.patch(
        "cargoscript.platform.cargo.runner.subprocess.run",
        return_value=subprocess.CompletedProcess([], 4),
    )

    status = ArtifactRunner().run(Path("/bin/demo"), ["a", "--b"])

    assert status == 4
    assert run.call_args.args[0] == ["/bin/demo", "a", "--b"]


def test_bench_mode_adds_bench_flag(mocker: MockerFixture) -> None:
    run = mocker.patch(
        "cargoscript.platform.cargo.runner.subprocess.run",
        return_value=subprocess.CompletedProcess([], 0),
    )

    _ = ArtifactRunner().run(Path("/bin/demo"), ["filter"], BuildMode.BENCH)

    assert run.call_args.args[0] == ["/bin/demo", "--bench", "filter"]


def test_signal_termination_maps_to_shell_status(mocker: MockerFixture) -> None:
    _ = mocker.patch(
        "cargoscript.platform.cargo.runner.subprocess.run",
        return_value=subprocess.CompletedProcess([], -2),
    )

    assert ArtifactRunner().run(Path("/bin/demo"), []) == 130
