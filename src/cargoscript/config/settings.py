"""Where: src/cargoscript/config/settings.py
What: Fixed constants describing generated packages and the cache layout.
Why: Keep layout names in one place so the cache and synthesizer agree.
"""

from __future__ import annotations

from typing import Final

# Generated package identity ---------------------------------------------------

PACKAGE_VERSION: Final[str] = "0.1.0"
MANIFEST_FILE_NAME: Final[str] = "Cargo.toml"
SOURCE_FILE_NAME: Final[str] = "main.rs"
# Build output directory inside each package, passed to cargo as --target-dir.
TARGET_DIR_NAME: Final[str] = "target"
FALLBACK_PACKAGE_NAME: Final[str] = "script"

# Cache layout -------------------------------------------------------------------

METADATA_FILE_NAME: Final[str] = "metadata.json"
METADATA_FORMAT_VERSION: Final[int] = 1
# Hex digits of the fingerprint used for package directory names.
PACKAGE_DIR_DIGEST_LENGTH: Final[int] = 16
# Hex digits of the path discriminator folded into slot names.
SLOT_DISCRIMINATOR_LENGTH: Final[int] = 16

# Templates ----------------------------------------------------------------------

TEMPLATE_SUFFIX: Final[str] = ".rs"
EXPRESSION_TEMPLATE: Final[str] = "expr"
FILTER_TEMPLATE: Final[str] = "loop"
FILTER_COUNT_TEMPLATE: Final[str] = "loop_count"
RESERVED_TEMPLATE_NAMES: Final[tuple[str, ...]] = (
    EXPRESSION_TEMPLATE,
    FILTER_TEMPLATE,
    FILTER_COUNT_TEMPLATE,
)


__all__ = [
    "EXPRESSION_TEMPLATE",
    "FALLBACK_PACKAGE_NAME",
    "FILTER_COUNT_TEMPLATE",
    "FILTER_TEMPLATE",
    "MANIFEST_FILE_NAME",
    "METADATA_FILE_NAME",
    "METADATA_FORMAT_VERSION",
    "PACKAGE_DIR_DIGEST_LENGTH",
    "PACKAGE_VERSION",
    "RESERVED_TEMPLATE_NAMES",
    "SLOT_DISCRIMINATOR_LENGTH",
    "SOURCE_FILE_NAME",
    "TARGET_DIR_NAME",
    "TEMPLATE_SUFFIX",
]
