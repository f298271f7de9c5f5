from __future__ import annotations

import logging
from typing import Iterable, List, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from handwerk.errors import UpstreamError
from handwerk.schemas import OrderEntry

logger = logging.getLogger(__name__)


async def apply_orders(sessions: async_sessionmaker[AsyncSession], model: Type, entries: Iterable[OrderEntry]) -> int:
    """Write each ``{id, order}`` pair in its own transaction.

    Rows are not updated atomically as a set: rows written before a failure
    keep their new order. Raises ``UpstreamError`` naming every failed id so
    the caller can revert its view.
    """
    failed: List[str] = []
    updated = 0
    for entry in entries:
        try:
            async with sessions() as session, session.begin():
                row = await session.get(model, entry.id)
                if row is None:
                    failed.append(f"{entry.id} (not found)")
                    continue
                row.order = entry.order
            updated += 1
        except SQLAlchemyError as exc:
            logger.warning("[orders] %s %s update failed: %s", model.__tablename__, entry.id, exc)
            failed.append(f"{entry.id} ({exc.__class__.__name__})")
    if failed:
        raise UpstreamError(f"Failed to update order for {model.__tablename__}: {', '.join(failed)}")
    logger.info("[orders] updated %d %s rows", updated, model.__tablename__)
    return updated
