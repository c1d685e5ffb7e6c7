# rct_connect/db/query.py
"""
Linear-scan helpers over the in-memory collections.

Every lookup walks the list start to end; joins (author, sender, creator)
are one scan per item. Fine for a single club's data, nothing more.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Iterable, List, Optional

from .store import JsonStore


def _matches(row: dict, criteria: dict) -> bool:
    return all(row.get(k) == v for k, v in criteria.items())


def find_one(items: Iterable[dict], **criteria) -> Optional[dict]:
    for row in items:
        if _matches(row, criteria):
            return row
    return None


def find_index(items: List[dict], **criteria) -> int:
    for i, row in enumerate(items):
        if _matches(row, criteria):
            return i
    return -1


def filter_by(items: Iterable[dict], **criteria) -> List[dict]:
    return [row for row in items if _matches(row, criteria)]


def exists(items: Iterable[dict], **criteria) -> bool:
    return find_one(items, **criteria) is not None


def remove_where(store: JsonStore, name: str, predicate: Optional[Callable[[dict], bool]] = None, **criteria) -> int:
    """Rebuild collection ``name`` without matching rows; returns how many went."""
    rows = store.collection(name)
    if predicate is None:
        def predicate(row):
            return _matches(row, criteria)
    kept = [row for row in rows if not predicate(row)]
    store.replace(name, kept)
    return len(rows) - len(kept)


def oldest_first(items: Iterable[dict], key: str = "created_at") -> List[dict]:
    return sorted(items, key=lambda r: r.get(key) or "")


def newest_first(items: Iterable[dict], key: str = "created_at") -> List[dict]:
    # ties (same millisecond) fall back to reverse insertion order
    return oldest_first(items, key)[::-1]


def user_summary(store: JsonStore, user_id: Optional[str], avatar: bool = True) -> Optional[dict]:
    user = find_one(store.data["users"], id=user_id)
    if not user:
        return None
    out = {"id": user["id"], "name": user["name"]}
    if avatar:
        out["avatar"] = user.get("avatar")
    return out


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def average(values: List[Any]) -> float:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values), 1)
