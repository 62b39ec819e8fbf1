"""Package synthesis: template + manifest + mode -> generated cargo package.

Where: features/package/usecases/synthesizer.py
What: Build the generated ``Cargo.toml`` and ``main.rs`` text for a script.
Why: A pure, deterministic function of its inputs keeps cache keys honest;
    writing the package to disk is left to the artifact cache.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Final

from cargoscript.config.settings import PACKAGE_VERSION, SOURCE_FILE_NAME
from cargoscript.features.manifest.domain.errors import MalformedManifest
from cargoscript.features.manifest.domain.models import DependencySpec, ManifestDeclaration
from cargoscript.features.package.domain.models import (
    InvocationMode,
    ModeKind,
    PackageOverrides,
    SynthesizedPackage,
)
from cargoscript.features.package.usecases.manifest_writer import merge_tables, render_manifest
from cargoscript.features.package.usecases.naming import sanitize_package_name
from cargoscript.features.templates.domain.template import Template

_EXPRESSION_PRELUDE: Final[str] = """\
#[allow(unused_imports)]
use std::io::prelude::*;
#[allow(unused_imports)]
use std::fmt::Write as _;
#[allow(unused_imports)]
use std::str::FromStr;
"""

_FILTER_PRELUDE: Final[str] = """\
use std::any::Any;
use std::io::BufRead;

fn assert_closure<F, T>(closure: F) -> F
where
    F: FnMut({arguments}) -> T,
{{
    closure
}}
"""


def build_prelude(mode: InvocationMode, unstable_features: Iterable[str] = ()) -> str:
    """Return the mode-specific scaffolding substituted for ``#{prelude}``.

    Feature gates always come first so they stay valid crate-level attributes.
    """
    lines: list[str] = []
    seen: set[str] = set()
    for feature in unstable_features:
        feature = feature.strip()
        if feature and feature not in seen:
            seen.add(feature)
            lines.append(f"#![feature({feature})]")
    features = "\n".join(lines) + "\n" if lines else ""

    if mode.kind is ModeKind.EXPRESSION:
        return features + _EXPRESSION_PRELUDE
    if mode.kind is ModeKind.FILTER:
        arguments = "String, usize" if mode.count else "String"
        return features + _FILTER_PRELUDE.format(arguments=arguments)
    return features


def compose_manifest(
    name: str,
    declaration: ManifestDeclaration,
    overrides: PackageOverrides,
) -> dict[str, Any]:
    """Merge the synthetic identity, dependencies and raw fragments.

    Later layers win: identity < declared and extra dependencies < the
    script's manifest fragment < caller manifest overrides.

    Raises:
        MalformedManifest: If an extra dependency repeats one declared by the
            short-form comment or the fenced manifest.
    """
    dependencies: dict[str, Any] = {}
    fenced = (declaration.fragment or {}).get("dependencies")
    fenced_keys = set(fenced) if isinstance(fenced, dict) else set()
    for spec in _unique_dependencies(
        declaration.dependencies, overrides.dependencies, reserved=fenced_keys
    ):
        dependencies[spec.key] = spec.manifest_value()

    document: dict[str, Any] = {
        "package": {
            "name": name,
            "version": PACKAGE_VERSION,
            "edition": overrides.edition,
        },
        "bin": [{"name": name, "path": SOURCE_FILE_NAME}],
        "dependencies": dependencies,
    }
    if declaration.fragment:
        document = merge_tables(document, declaration.fragment)
    if overrides.manifest:
        document = merge_tables(document, overrides.manifest)
    return document


def synthesize_package(
    body: str,
    declaration: ManifestDeclaration,
    template: Template,
    mode: InvocationMode,
    overrides: PackageOverrides | None = None,
    *,
    script_name: str,
) -> SynthesizedPackage:
    """Generate the in-memory package for a script.

    Args:
        body: Script body with the manifest comment already removed.
        declaration: Dependencies and fragment extracted from the script.
        template: Template wrapping the body.
        mode: Invocation mode selecting the prelude.
        overrides: Extra dependencies, feature gates and manifest overrides.
        script_name: Logical script name; sanitised into the package name.

    Returns:
        SynthesizedPackage: Identical inputs always give identical bytes.
    """
    overrides = overrides or PackageOverrides()
    name = sanitize_package_name(script_name)

    prelude = build_prelude(mode, overrides.unstable_features)
    source = template.render(prelude, body)
    if not source.endswith("\n"):
        source += "\n"

    manifest = render_manifest(compose_manifest(name, declaration, overrides))
    return SynthesizedPackage(name=name, manifest=manifest, source=source)


def _unique_dependencies(
    declared: Iterable[DependencySpec],
    extra: Iterable[DependencySpec],
    *,
    reserved: set[str],
) -> list[DependencySpec]:
    result = list(declared)
    keys = {spec.key for spec in result}
    for spec in extra:
        if spec.key in reserved:
            raise MalformedManifest(
                f"dependency '{spec.key}' is already declared in the script's manifest"
            )
        if spec.key in keys:
            raise MalformedManifest(f"dependency '{spec.key}' is declared more than once")
        keys.add(spec.key)
        result.append(spec)
    return result


__all__ = ["build_prelude", "compose_manifest", "synthesize_package"]
