from __future__ import annotations

"""
Ledger namespace helpers.

Every runtime keeps its state under its own top-level key of the node
ledger dict. These helpers repair a namespace that was persisted with the
wrong shape instead of failing on it.
"""

from typing import Any, Dict


def ns(ledger: Dict[str, Any], key: str) -> Dict[str, Any]:
    obj = ledger.setdefault(key, {})
    if not isinstance(obj, dict):
        ledger[key] = {}
        obj = ledger[key]
    return obj


def dict_ns(parent: Dict[str, Any], key: str) -> Dict[str, Any]:
    obj = parent.setdefault(key, {})
    if not isinstance(obj, dict):
        parent[key] = {}
        obj = parent[key]
    return obj


def int_field(parent: Dict[str, Any], key: str, default: int = 0) -> int:
    try:
        return int(parent.get(key, default))
    except (TypeError, ValueError):
        parent[key] = default
        return default
