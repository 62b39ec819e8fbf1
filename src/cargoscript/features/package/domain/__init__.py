"""Package synthesis domain models."""
