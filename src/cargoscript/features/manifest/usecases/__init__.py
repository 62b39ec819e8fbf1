"""Manifest extraction use cases."""
