"""Configuration, paths and layout constants."""
