"""Platform adapters: logging, filesystem and the Rust toolchain."""
