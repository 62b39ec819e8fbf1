# Path: `src/cargoscript/features/manifest/__init__.py`
# Summary: Export manifest extraction domain and use case symbols.
# Why: Provide a stable import surface for the synthesizer, services and tests.

from .domain.errors import (
    InvalidManifestSyntax,
    MalformedManifest,
    ManifestError,
    MultipleManifests,
)
from .domain.models import (
    WILDCARD_VERSION,
    DependencySpec,
    ExtractionResult,
    ManifestDeclaration,
    ManifestFormat,
)
from .usecases.extractor import (
    FENCE_LANGUAGE,
    SHORT_FORM_MARKER,
    extract_manifest,
    parse_dependency_arg,
    parse_dependency_spec,
)

__all__ = [
    "DependencySpec",
    "ExtractionResult",
    "FENCE_LANGUAGE",
    "InvalidManifestSyntax",
    "MalformedManifest",
    "ManifestDeclaration",
    "ManifestError",
    "ManifestFormat",
    "MultipleManifests",
    "SHORT_FORM_MARKER",
    "WILDCARD_VERSION",
    "extract_manifest",
    "parse_dependency_arg",
    "parse_dependency_spec",
]
