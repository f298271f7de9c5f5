from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from handwerk.services.ranking import (
    featured_position,
    rank,
    select_favorites,
    select_featured,
    select_newest,
    select_recent,
)

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class Row:
    id: int
    is_favorite: bool = False
    order: int = 0
    featured_haken: bool = False
    featured_borduren: bool = False
    featured_order_haken: Optional[int] = None
    featured_order_borduren: Optional[int] = None
    created_at: datetime = T0


def ids(rows) -> list[int]:
    return [row.id for row in rows]


def test_favorite_beats_featured() -> None:
    a = Row(1, is_favorite=True, order=5)
    b = Row(2, featured_haken=True, featured_order_haken=1, order=1)
    assert ids(rank([a, b])) == [1, 2]
    assert ids(rank([b, a])) == [1, 2]


def test_end_to_end_scenario() -> None:
    items = [
        Row(1, featured_haken=True, featured_order_haken=2),
        Row(2, is_favorite=True, order=0, created_at=T0),
        Row(3, order=0, created_at=T0 + timedelta(hours=1)),
    ]
    assert ids(rank(items)) == [2, 1, 3]


def test_favorites_sorted_by_manual_order_then_newest() -> None:
    items = [
        Row(1, is_favorite=True, order=2, created_at=T0),
        Row(2, is_favorite=True, order=1, created_at=T0),
        Row(3, is_favorite=True, order=1, created_at=T0 + timedelta(days=1)),
    ]
    assert ids(rank(items)) == [3, 2, 1]


def test_featured_uses_smallest_channel_order() -> None:
    a = Row(1, featured_haken=True, featured_order_haken=5, featured_borduren=True, featured_order_borduren=2)
    b = Row(2, featured_haken=True, featured_order_haken=3)
    c = Row(3, featured_borduren=True, featured_order_borduren=1)
    assert featured_position(a) == 2
    assert featured_position(Row(4)) == 999
    assert ids(rank([a, b, c])) == [3, 1, 2]


def test_featured_before_regular_regardless_of_manual_order() -> None:
    featured = Row(1, order=50, featured_borduren=True, featured_order_borduren=9)
    regular = Row(2, order=0)
    assert ids(rank([regular, featured])) == [1, 2]


def test_regular_items_by_manual_order_then_newest() -> None:
    items = [
        Row(1, order=1, created_at=T0),
        Row(2, order=0, created_at=T0),
        Row(3, order=0, created_at=T0 + timedelta(minutes=5)),
        Row(4, order=0, created_at=T0 + timedelta(minutes=5)),  # duplicate key, settled by id
    ]
    assert ids(rank(items)) == [3, 4, 2, 1]


def test_rank_is_independent_of_input_order() -> None:
    items = [
        Row(1, is_favorite=True, order=1),
        Row(2, is_favorite=True, order=1, created_at=T0 + timedelta(seconds=1)),
        Row(3, featured_haken=True, featured_order_haken=1),
        Row(4, featured_borduren=True, featured_order_borduren=1),
        Row(5, order=2),
        Row(6, order=2),
    ]
    expected = ids(rank(items))
    for permutation in itertools.permutations(items):
        assert ids(rank(list(permutation))) == expected


def test_selection_helpers() -> None:
    items = [Row(i, is_favorite=i <= 4, order=i, created_at=T0 + timedelta(minutes=i)) for i in range(1, 15)]
    ranked = rank(items)
    assert ids(select_favorites(ranked)) == [1, 2, 3]
    assert len(select_recent(ranked)) == 10
    assert ids(select_newest(items, limit=3)) == [14, 13, 12]


def test_select_featured_per_channel() -> None:
    items = [
        Row(1, featured_haken=True, featured_order_haken=3),
        Row(2, featured_haken=True, featured_order_haken=1),
        Row(3, featured_borduren=True, featured_order_borduren=1),
        Row(4),
    ]
    assert ids(select_featured(items, "haken")) == [2, 1]
    assert ids(select_featured(items, "borduren")) == [3]
