# Path: `src/cargoscript/features/package/__init__.py`
# Summary: Export package synthesis domain and use case symbols.
# Why: Provide a stable import surface for services, the cache and tests.

from .domain.models import InvocationMode, ModeKind, PackageOverrides, SynthesizedPackage
from .usecases.manifest_writer import merge_tables, render_manifest
from .usecases.naming import sanitize_package_name, slot_name
from .usecases.synthesizer import build_prelude, compose_manifest, synthesize_package

__all__ = [
    "InvocationMode",
    "ModeKind",
    "PackageOverrides",
    "SynthesizedPackage",
    "build_prelude",
    "compose_manifest",
    "merge_tables",
    "render_manifest",
    "sanitize_package_name",
    "slot_name",
    "synthesize_package",
]
