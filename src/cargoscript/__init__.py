"""cargoscript: compile and run single-file Rust scripts with cached builds."""

__version__ = "0.1.0"
