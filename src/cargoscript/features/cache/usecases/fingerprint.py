"""Summary: Derive the content-addressed cache key for a synthesized package.
Why: Every input that changes the compiled artifact must change the key.
"""

from __future__ import annotations

import hashlib
from typing import Final

from cargoscript.features.cache.domain.models import BuildFlags
from cargoscript.features.package.domain.models import SynthesizedPackage

# Bump when the encoding below changes so old entries can never match.
FINGERPRINT_VERSION: Final[bytes] = b"cargoscript-fingerprint-v1"


def derive_fingerprint(package: SynthesizedPackage, flags: BuildFlags) -> str:
    """Hash manifest bytes, source bytes and the canonical build flags.

    Each field is length-prefixed so no two distinct tuples share an encoding.

    Args:
        package: Generated manifest and source.
        flags: Optimisation level, features, build mode and toolchain identity.

    Returns:
        str: Hex SHA-256 digest.
    """
    digest = hashlib.sha256()
    for part in (
        FINGERPRINT_VERSION,
        package.manifest.encode("utf-8"),
        package.source.encode("utf-8"),
        flags.canonical().encode("utf-8"),
    ):
        digest.update(len(part).to_bytes(8, "big"))
        digest.update(part)
    return digest.hexdigest()


__all__ = ["FINGERPRINT_VERSION", "derive_fingerprint"]
