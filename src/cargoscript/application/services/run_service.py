"""Application service for running a script through the artifact cache.

This layer centralizes construction of the registry, cache and toolchain
adapters so the CLI only translates arguments into a ``ScriptRunRequest``.

Flow: read script -> extract manifest -> load template -> synthesize ->
fingerprint -> cache lookup. On a miss the package is materialized, built
and committed; on a hit synthesis output is only used for the key.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import final

from cargoscript.config.config import Config
from cargoscript.config.file_ops import write_text_file
from cargoscript.config.settings import MANIFEST_FILE_NAME, SOURCE_FILE_NAME
from cargoscript.features.cache import (
    ArtifactCache,
    BuildFailed,
    BuildFlags,
    BuildMode,
    BuildPort,
    BuildReservation,
    CacheEntry,
    CacheHit,
    CacheSlot,
    ExecutionPort,
    ToolchainPort,
    derive_fingerprint,
)
from cargoscript.features.manifest import DependencySpec, ManifestDeclaration, extract_manifest
from cargoscript.features.package import (
    InvocationMode,
    ModeKind,
    PackageOverrides,
    SynthesizedPackage,
    synthesize_package,
)
from cargoscript.features.templates import PASSTHROUGH_TEMPLATE, Template, TemplateRegistry
from cargoscript.platform.cargo import ArtifactRunner, CargoBuilder, RustcToolchainProbe
from cargoscript.platform.filesystem import ensure_directory
from cargoscript.platform.logging import logger
from cargoscript.shared.script_source import (
    EXPRESSION_SCRIPT_NAME,
    FILTER_SCRIPT_NAME,
    ScriptSource,
)


@dataclass(frozen=True)
class ScriptRunRequest:
    """Input parameters for one script invocation.

    Attributes:
        script_path: Script file; ``None`` when ``code`` is given.
        code: Inline expression or filter closure.
        mode: Wrapping flavour applied to the body.
        args: Arguments passed to the compiled program.
        template_name: Template overriding the mode's default.
        dependencies: Extra dependencies merged after the declared ones.
        unstable_features: ``#![feature(...)]`` gates added to the prelude.
        features: Cargo features enabled for the build.
        build_mode: Produce a normal, test or bench executable.
        release: Optimised build; bench builds are always optimised.
        force: Rebuild even when a Ready artifact matches.
        build_only: Stop after the artifact is cached.
    """

    script_path: Path | None = None
    code: str | None = None
    mode: InvocationMode = field(default_factory=InvocationMode.script)
    args: tuple[str, ...] = ()
    template_name: str | None = None
    dependencies: tuple[DependencySpec, ...] = ()
    unstable_features: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    build_mode: BuildMode = BuildMode.RUN
    release: bool = True
    force: bool = False
    build_only: bool = False

    def __post_init__(self) -> None:
        if (self.script_path is None) == (self.code is None):
            raise ValueError("exactly one of script_path and code is required")


@dataclass(frozen=True)
class PreparedScript:
    """Everything needed to look the script up in the cache."""

    script: ScriptSource
    package: SynthesizedPackage
    flags: BuildFlags
    slot: CacheSlot
    fingerprint: str


@dataclass(frozen=True)
class ScriptRunResult:
    """Outcome of ``ScriptRunService.run``."""

    exit_code: int
    artifact_path: Path
    fingerprint: str
    cache_hit: bool


@final
class ScriptRunService:
    """Application service that turns a script into a cached, runnable artifact."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        cache_factory: Callable[[Path], ArtifactCache] | None = None,
        registry: TemplateRegistry | None = None,
        builder: BuildPort | None = None,
        toolchain: ToolchainPort | None = None,
        runner: ExecutionPort | None = None,
    ) -> None:
        """Create a service with overridable toolchain adapters.

        Tests inject fakes for ``builder``, ``toolchain`` and ``runner``;
        production code uses the cargo and rustc adapters named in ``config``.
        """
        self._config = config or Config.load()
        self._cache_factory: Callable[[Path], ArtifactCache] = cache_factory or ArtifactCache
        self._registry = registry or TemplateRegistry(self._config.resolved_template_dir())
        self._builder: BuildPort = builder or CargoBuilder(self._config.cargo_command)
        self._toolchain: ToolchainPort | None = toolchain
        self._runner: ExecutionPort = runner or ArtifactRunner()
        self._cache: ArtifactCache | None = None

    @property
    def cache(self) -> ArtifactCache:
        """Artifact cache, opened on first use so ``--gen-pkg-only`` never touches it."""

        if self._cache is None:
            self._cache = self._cache_factory(self._config.resolved_cache_dir())
        return self._cache

    @property
    def toolchain(self) -> ToolchainPort:
        """Compiler identity source, probed from the cache root that builds run under."""

        if self._toolchain is None:
            self._toolchain = RustcToolchainProbe(
                self._config.rustc_command, cwd=self.cache.root
            )
        return self._toolchain

    # Synthesis -------------------------------------------------------------------

    def load_script(self, request: ScriptRunRequest) -> ScriptSource:
        """Read the script file or wrap inline code under its fixed logical name."""

        if request.code is not None:
            name = (
                FILTER_SCRIPT_NAME
                if request.mode.kind is ModeKind.FILTER
                else EXPRESSION_SCRIPT_NAME
            )
            return ScriptSource.inline(request.code, name)
        assert request.script_path is not None
        return ScriptSource.from_path(request.script_path)

    def load_template(self, request: ScriptRunRequest) -> Template:
        """Resolve the template before any synthesis work starts."""

        name = request.template_name or request.mode.default_template_name
        if name is None:
            return PASSTHROUGH_TEMPLATE
        return self._registry.load(name)

    def synthesize(self, request: ScriptRunRequest) -> tuple[ScriptSource, SynthesizedPackage]:
        """Produce the in-memory package for ``request``.

        Only script files carry embedded manifests; inline code is wrapped as-is.
        """
        script = self.load_script(request)
        template = self.load_template(request)

        if request.mode.kind is ModeKind.SCRIPT:
            declaration, body = extract_manifest(script.text)
        else:
            declaration, body = ManifestDeclaration(), script.text

        overrides = PackageOverrides(
            dependencies=request.dependencies,
            unstable_features=request.unstable_features,
            edition=self._config.edition,
        )
        package = synthesize_package(
            body,
            declaration,
            template,
            request.mode,
            overrides,
            script_name=script.logical_name,
        )
        return script, package

    def prepare(self, request: ScriptRunRequest) -> PreparedScript:
        """Synthesize the package and derive its fingerprint."""

        script, package = self.synthesize(request)
        flags = BuildFlags(
            release=request.release or request.build_mode is BuildMode.BENCH,
            features=request.features,
            mode=request.build_mode,
            toolchain=self.toolchain.identify(),
        )
        return PreparedScript(
            script=script,
            package=package,
            flags=flags,
            slot=CacheSlot.for_script(script),
            fingerprint=derive_fingerprint(package, flags),
        )

    def generate_package(self, request: ScriptRunRequest, destination: Path | None = None) -> Path:
        """Write the synthesized package to ``destination``, bypassing the cache.

        Without a destination the package lands in ``./<package name>``.
        """
        _, package = self.synthesize(request)
        if destination is None:
            destination = Path.cwd() / package.name
        target = ensure_directory(destination.expanduser())
        write_text_file(target / MANIFEST_FILE_NAME, package.manifest)
        write_text_file(target / SOURCE_FILE_NAME, package.source)
        logger.info("Generated package %s in %s", package.name, target)
        return target

    # Build and run -------------------------------------------------------------------

    def build(self, request: ScriptRunRequest) -> tuple[PreparedScript, CacheEntry, bool]:
        """Return the Ready cache entry for ``request``, building it on a miss.

        Returns:
            tuple: Prepared script, Ready entry and whether it was a cache hit.

        Raises:
            BuildFailed: If the build fails; the fingerprint is marked broken.
        """
        prepared = self.prepare(request)
        outcome = self.cache.lookup_or_reserve(
            prepared.slot, prepared.fingerprint, prepared.flags, force=request.force
        )
        if isinstance(outcome, CacheHit):
            return prepared, outcome.entry, True

        entry = self._build_reserved(outcome, prepared)
        return prepared, entry, False

    def run(self, request: ScriptRunRequest) -> ScriptRunResult:
        """Build if needed, then execute the artifact unless ``build_only`` is set."""

        prepared, entry, hit = self.build(request)
        if request.build_only:
            exit_code = 0
        else:
            exit_code = self._runner.run(entry.artifact_path, request.args, prepared.flags.mode)
        return ScriptRunResult(
            exit_code=exit_code,
            artifact_path=entry.artifact_path,
            fingerprint=prepared.fingerprint,
            cache_hit=hit,
        )

    def _build_reserved(self, reservation: BuildReservation, prepared: PreparedScript) -> CacheEntry:
        package_dir = self.cache.materialize(reservation, prepared.package)
        logger.info(
            "Building %s",
            prepared.slot.name,
            extra={
                "cache_event": "build.start",
                "script": prepared.slot.name,
                "fingerprint": prepared.fingerprint,
                "profile": prepared.flags.profile,
                "location": str(package_dir),
            },
        )
        try:
            artifact = self._builder.build(package_dir, prepared.flags)
            return self.cache.commit(reservation, artifact)
        except BuildFailed as exc:
            logger.error(
                "Build failed for %s",
                prepared.slot.name,
                extra={
                    "cache_event": "build.failed",
                    "script": prepared.slot.name,
                    "fingerprint": prepared.fingerprint,
                    "reason": exc.message,
                },
            )
            self.cache.mark_broken(reservation, exc.message)
            raise


__all__ = ["PreparedScript", "ScriptRunRequest", "ScriptRunResult", "ScriptRunService"]
