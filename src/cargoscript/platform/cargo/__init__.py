"""Adapters around the external Rust toolchain."""

from .builder import MESSAGE_FORMAT, CargoBuilder
from .runner import ArtifactRunner
from .toolchain import RustcToolchainProbe

__all__ = ["ArtifactRunner", "CargoBuilder", "MESSAGE_FORMAT", "RustcToolchainProbe"]
