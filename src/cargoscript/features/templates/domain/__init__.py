"""Template domain models and errors."""
