"""Tests for the rustc toolchain identity probe."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from cargoscript.features.cache import ToolchainUnavailable
from cargoscript.platform.cargo import RustcToolchainProbe

RUSTC_OUTPUT = """rustc 1.80.0 (051478957 2024-07-21)
binary: rustc
commit-hash:   0514789
host: x86_64-unknown-linux-gnu

release: 1.80.0
"""


def test_identity_is_whitespace_normalised(mocker: MockerFixture) -> None:
    run = mocker.patch(
        "cargoscript.platform.cargo.toolchain.subprocess.run",
        return_value=subprocess.CompletedProcess(["rustc", "-vV"], 0, RUSTC_OUTPUT, ""),
    )
    probe = RustcToolchainProbe("rustc")

    identity = probe.identify()

    assert identity == (
        "rustc 1.80.0 (051478957 2024-07-21)\n"
        "binary: rustc\n"
        "commit-hash: 0514789\n"
        "host: x86_64-unknown-linux-gnu\n"
        "release: 1.80.0"
    )
    assert probe.identify() == identity
    run.assert_called_once()
    assert run.call_args.args[0] == ["rustc", "-vV"]


def test_missing_rustc_is_unavailable(mocker: MockerFixture) -> None:
    _ = mocker.patch(
        "cargoscript.platform.cargo.toolchain.subprocess.run",
        side_effect=FileNotFoundError("rustc"),
    )

    with pytest.raises(ToolchainUnavailable) as excinfo:
        _ = RustcToolchainProbe().identify()

    assert excinfo.value.exit_code == 127


def test_failing_rustc_is_unavailable(mocker: MockerFixture) -> None:
    _ = mocker.patch(
        "cargoscript.platform.cargo.toolchain.subprocess.run",
        return_value=subprocess.CompletedProcess(["rustc", "-vV"], 1, "", "error: broken toolchain"),
    )

    with pytest.raises(ToolchainUnavailable, match="broken toolchain"):
        _ = RustcToolchainProbe().identify()


def test_probe_runs_in_the_build_directory(tmp_path: Path, mocker: MockerFixture) -> None:
    """rustup directory overrides are resolved where cargo builds, not in the caller's cwd."""

    run = mocker.patch(
        "cargoscript.platform.cargo.toolchain.subprocess.run",
        return_value=subprocess.CompletedProcess(["rustc", "-vV"], 0, RUSTC_OUTPUT, ""),
    )

    _ = RustcToolchainProbe(cwd=tmp_path).identify()

    assert run.call_args.kwargs["cwd"] == tmp_path
