"""Cargo build adapter.

Where: platform/cargo/builder.py
What: Compile a materialized package with cargo and locate the produced executable.
Why: Keep subprocess handling and cargo's JSON protocol out of the use cases.
"""

from __future__ import annotations

import json
import subprocess
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, final

from cargoscript.config.settings import MANIFEST_FILE_NAME, TARGET_DIR_NAME
from cargoscript.features.cache.domain.errors import BuildFailed, ToolchainUnavailable
from cargoscript.features.cache.domain.models import BuildFlags, BuildMode
from cargoscript.platform.logging import logger

MESSAGE_FORMAT = "--message-format=json-render-diagnostics"


@final
class CargoBuilder:
    """Run ``cargo build``/``test``/``bench`` for one package directory.

    Diagnostics are rendered by cargo straight to the inherited stderr; only
    the JSON messages on stdout are consumed here.
    """

    def __init__(self, cargo_command: str = "cargo") -> None:
        self._cargo_command = cargo_command

    def command_for(self, package_dir: Path, flags: BuildFlags) -> list[str]:
        """Return the cargo command line that builds ``package_dir`` with ``flags``."""

        subcommand = {
            BuildMode.RUN: "build",
            BuildMode.TEST: "test",
            BuildMode.BENCH: "bench",
        }[flags.mode]
        command = [
            self._cargo_command,
            subcommand,
            "--manifest-path",
            str(package_dir / MANIFEST_FILE_NAME),
            # Output stays in the package even when CARGO_TARGET_DIR is set.
            "--target-dir",
            str(package_dir / TARGET_DIR_NAME),
            MESSAGE_FORMAT,
        ]
        if flags.mode is not BuildMode.RUN:
            command.append("--no-run")
        # cargo bench always uses the bench profile.
        if flags.release and flags.mode is not BuildMode.BENCH:
            command.append("--release")
        if flags.features:
            command.extend(["--features", ",".join(flags.features)])
        return command

    def build(self, package_dir: Path, flags: BuildFlags) -> Path:
        """Build the package and return the path of the executable to run.

        Raises:
            ToolchainUnavailable: If cargo cannot be started.
            BuildFailed: If cargo exits non-zero or reports no executable.
        """
        command = self.command_for(package_dir, flags)
        logger.debug("Executing: %s", " ".join(command))
        try:
            process = subprocess.Popen(
                command,
                cwd=package_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ToolchainUnavailable(f"cannot run '{self._cargo_command}': {exc}") from exc

        assert process.stdout is not None
        with process:
            artifact = self._select_artifact(self._messages(process.stdout), flags.mode)
            status = process.wait()

        if status != 0:
            raise BuildFailed(f"cargo exited with status {status}", status=status)
        if artifact is None:
            raise BuildFailed("cargo finished without reporting an executable")
        return artifact

    @staticmethod
    def _messages(lines: Iterable[str]) -> Iterable[dict[str, Any]]:
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                message = json.loads(stripped)
            except json.JSONDecodeError:
                # Build scripts may print plain text; pass it on untouched.
                _ = sys.stderr.write(line)
                continue
            if isinstance(message, dict):
                yield message

    @staticmethod
    def _select_artifact(messages: Iterable[dict[str, Any]], mode: BuildMode) -> Path | None:
        """Return the last matching executable; every message is consumed."""

        selected: Path | None = None
        for message in messages:
            if message.get("reason") != "compiler-artifact":
                continue
            executable = message.get("executable")
            if not executable:
                continue
            target = message.get("target") or {}
            profile = message.get("profile") or {}
            is_test = bool(profile.get("test"))
            if mode is BuildMode.RUN:
                if "bin" in target.get("kind", ()) and not is_test:
                    selected = Path(executable)
            elif is_test:
                selected = Path(executable)
        return selected


__all__ = ["CargoBuilder", "MESSAGE_FORMAT"]
