"""Favorite flags and per-channel featured slots.

Activating an item in a channel shifts every item already featured there
down by one and puts the new item at position 1, so the most recently
featured item shows first. Deactivating clears the position and leaves
gaps in the sequence.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from handwerk.errors import CapacityError, NotFound, ValidationError
from handwerk.models import CHANNELS, Item

logger = logging.getLogger(__name__)


def _check_channel(channel: str) -> None:
    if channel not in CHANNELS:
        raise ValidationError(f"Unknown channel: {channel}")


def set_featured(items: Sequence[Any], target: Any, channel: str, on: bool, limit: int = 10) -> List[Any]:
    """Toggle ``target`` in ``channel``; returns every item whose fields changed."""
    _check_channel(channel)
    flag, order_attr = f"featured_{channel}", f"featured_order_{channel}"
    if bool(getattr(target, flag)) == on:
        return []

    if not on:
        setattr(target, flag, False)
        setattr(target, order_attr, None)
        return [target]

    active = [item for item in items if getattr(item, flag) and item is not target]
    if len(active) >= limit:
        raise CapacityError(f"Maximaal {limit} uitgelichte items voor {channel} toegestaan")
    for item in active:
        setattr(item, order_attr, (getattr(item, order_attr) or 0) + 1)
    setattr(target, flag, True)
    setattr(target, order_attr, 1)
    return [*active, target]


def set_favorite(items: Sequence[Any], target: Any, on: bool, limit: int = 3) -> List[Any]:
    if bool(target.is_favorite) == on:
        return []
    if on and sum(1 for item in items if item.is_favorite and item is not target) >= limit:
        raise CapacityError(f"Maximaal {limit} favorieten toegestaan")
    target.is_favorite = on
    return [target]


class FeaturedSlotWriter:
    """Single writer for favorite and featured changes.

    One lock per channel (plus one for favorites) and one transaction per
    change, so two admins activating items at the same time cannot both
    read the same channel state.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession], featured_limit: int = 10, favorites_limit: int = 3):
        self.sessions = sessions
        self.featured_limit = featured_limit
        self.favorites_limit = favorites_limit
        self._locks: Dict[str, asyncio.Lock] = {name: asyncio.Lock() for name in (*CHANNELS, "favorite")}

    async def set_featured(self, item_id: int, channel: str, on: bool) -> Item:
        _check_channel(channel)
        flag = getattr(Item, f"featured_{channel}")
        async with self._locks[channel]:
            async with self.sessions() as session, session.begin():
                target = await session.get(Item, item_id)
                if target is None:
                    raise NotFound("Not found")
                rows = (await session.execute(select(Item).where(or_(flag.is_(True), Item.id == item_id)))).scalars().all()
                changed = set_featured(rows, target, channel, on, limit=self.featured_limit)
                if changed:
                    logger.info("[featured] %s item %s in %s (%d rows rewritten)",
                                "activated" if on else "deactivated", item_id, channel, len(changed))
            return target

    async def set_favorite(self, item_id: int, on: bool) -> Item:
        async with self._locks["favorite"]:
            async with self.sessions() as session, session.begin():
                target = await session.get(Item, item_id)
                if target is None:
                    raise NotFound("Not found")
                rows = (await session.execute(select(Item).where(Item.is_favorite.is_(True)))).scalars().all()
                set_favorite(rows, target, on, limit=self.favorites_limit)
            return target
