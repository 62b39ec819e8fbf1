"""Execute a compiled script artifact."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import final

from cargoscript.features.cache.domain.errors import ToolchainUnavailable
from cargoscript.features.cache.domain.models import BuildMode
from cargoscript.platform.logging import logger


@final
class ArtifactRunner:
    """Run an executable with inherited stdio and report its exit status."""

    def run(self, artifact: Path, args: Sequence[str], mode: BuildMode = BuildMode.RUN) -> int:
        """Run ``artifact`` and return a shell-style exit status.

        Bench binaries receive ``--bench`` before the user's arguments.
        A child killed by signal N maps to ``128 + N``.
        """
        command = [str(artifact)]
        if mode is BuildMode.BENCH:
            command.append("--bench")
        command.extend(args)

        logger.debug("Executing: %s", " ".join(command))
        try:
            result = subprocess.run(command, check=False)
        except OSError as exc:
            raise ToolchainUnavailable(f"cannot execute {artifact}: {exc}") from exc

        if result.returncode < 0:
            return 128 - result.returncode
        return result.returncode


__all__ = ["ArtifactRunner"]
