"""Cache use cases: fingerprinting and the artifact cache."""
