"""Cache domain models and errors."""
