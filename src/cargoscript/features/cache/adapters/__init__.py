"""Persistence adapters for cache metadata."""
