"""Structural merging and rendering of generated cargo manifests."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

import toml


def merge_tables(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Tables present on both sides are merged key by key. Any other value
    (scalars, arrays, a table replacing a scalar) from ``override`` replaces
    the value in ``base``. Neither input is modified.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_tables(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def render_manifest(document: Mapping[str, Any]) -> str:
    """Serialise a manifest table to TOML text."""

    return toml.dumps(dict(document))


__all__ = ["merge_tables", "render_manifest"]
