"""Package synthesis use cases."""
