"""Template loading use cases."""
