"""Config merging helpers."""

from __future__ import annotations

from typing import Any, Dict


def _merge_values(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            # null in a user config keeps the shipped default
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_values(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_sections(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay a user config onto the per-module section defaults.

    Args:
        base: Section defaults keyed by section name.
        overrides: Parsed user config.

    Returns:
        New merged dictionary; neither input is modified.
    """
    if not isinstance(overrides, dict):
        return dict(base)
    return _merge_values(base, overrides)
