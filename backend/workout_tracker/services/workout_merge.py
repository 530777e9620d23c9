"""Shared helpers for merging workout values from manual input and re-parsed files."""

from typing import Any, TypeVar

T = TypeVar("T")


def set_if_present(target: Any, attr: str, value: T | None) -> None:
    """Assign value to target.attr unless value is absent (None)."""
    if value is None:
        return
    setattr(target, attr, value)


def merge_extra(existing: dict | None, incoming: dict | None) -> dict:
    """Deep merge incoming into existing; prefer non-null from incoming. Preserve existing 'series' if incoming has none."""
    out = dict(existing or {})
    if not incoming:
        return out
    for k, v in incoming.items():
        if v is None:
            continue
        if k == "series" and isinstance(out.get(k), list):
            if isinstance(v, list) and v:
                out[k] = v
            continue
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_extra(out[k], v)
        else:
            out[k] = v
    return out
