"""Toolchain identity probe.

Where: platform/cargo/toolchain.py
What: Ask ``rustc`` who it is so artifacts from a different compiler never match.
Why: The identity string is folded into every fingerprint.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import final

from cargoscript.features.cache.domain.errors import ToolchainUnavailable
from cargoscript.platform.logging import logger


@final
class RustcToolchainProbe:
    """Read the compiler identity from ``rustc -vV``.

    ``cwd`` should be the directory builds run under: rustup resolves
    directory overrides (``rust-toolchain.toml``) from the working directory,
    so probing elsewhere may name a different compiler than the one cargo uses.
    """

    def __init__(self, rustc_command: str = "rustc", *, cwd: Path | None = None) -> None:
        self._rustc_command = rustc_command
        self._cwd = cwd
        self._identity: str | None = None

    def identify(self) -> str:
        """Return the whitespace-normalised ``rustc -vV`` output.

        The result is memoised for the lifetime of the probe.

        Raises:
            ToolchainUnavailable: If ``rustc`` is missing or exits non-zero.
        """
        if self._identity is not None:
            return self._identity

        command = [self._rustc_command, "-vV"]
        logger.debug("Executing: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ToolchainUnavailable(f"cannot run '{self._rustc_command}': {exc}") from exc

        if result.returncode != 0:
            detail = result.stderr.strip()[:500]
            raise ToolchainUnavailable(
                f"'{self._rustc_command} -vV' failed with exit code {result.returncode}"
                + (f": {detail}" if detail else "")
            )

        lines = [" ".join(line.split()) for line in result.stdout.splitlines()]
        self._identity = "\n".join(line for line in lines if line)
        return self._identity


__all__ = ["RustcToolchainProbe"]
