"""Ordering of catalog items for listings and carousels.

``rank`` is a pure sort over a snapshot of items. Items only need the
attributes of ``handwerk.models.Item``; plain objects work as well.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Sequence, Tuple

UNSET_FEATURED_ORDER = 999

FAVORITE, FEATURED, REGULAR = 0, 1, 2


def _timestamp(value: datetime | None) -> float:
    return value.timestamp() if value is not None else 0.0


def is_featured(item: Any) -> bool:
    return bool(item.featured_haken or item.featured_borduren)


def featured_position(item: Any) -> int:
    """Smallest featured order over both channels; 999 stands for unset."""
    haken = item.featured_order_haken if item.featured_order_haken is not None else UNSET_FEATURED_ORDER
    borduren = item.featured_order_borduren if item.featured_order_borduren is not None else UNSET_FEATURED_ORDER
    return min(haken, borduren)


def rank_key(item: Any) -> Tuple[int, int, float, Any]:
    if item.is_favorite:
        group, primary = FAVORITE, item.order or 0
    elif is_featured(item):
        group, primary = FEATURED, featured_position(item)
    else:
        group, primary = REGULAR, item.order or 0
    # newest first, then id so equal keys never depend on input order
    return group, primary, -_timestamp(item.created_at), item.id


def rank(items: Sequence[Any]) -> List[Any]:
    return sorted(items, key=rank_key)


def select_favorites(ranked: Sequence[Any], limit: int = 3) -> List[Any]:
    return [item for item in ranked if item.is_favorite][:limit]


def select_recent(ranked: Sequence[Any], limit: int = 10) -> List[Any]:
    return list(ranked[:limit])


def select_featured(items: Sequence[Any], channel: str, limit: int = 10) -> List[Any]:
    flag, order_attr = f"featured_{channel}", f"featured_order_{channel}"
    featured = [item for item in items if getattr(item, flag)]
    featured.sort(key=lambda item: (
        getattr(item, order_attr) if getattr(item, order_attr) is not None else UNSET_FEATURED_ORDER,
        -_timestamp(item.created_at),
        item.id,
    ))
    return featured[:limit]


def select_newest(items: Sequence[Any], limit: int = 10) -> List[Any]:
    return sorted(items, key=lambda item: (-_timestamp(item.created_at), item.id))[:limit]
