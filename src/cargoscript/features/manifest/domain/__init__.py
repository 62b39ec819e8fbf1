"""Manifest domain models and errors."""
