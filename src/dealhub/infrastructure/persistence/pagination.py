"""Cursor pagination over SQLAlchemy selects.

Applies the watermark filter and ordering for a :class:`CursorPager` cursor
to an arbitrary filtered ``select`` and returns one :class:`Page`.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import Select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from dealhub.core.logging import get_logger
from dealhub.domain.entities.page import Page
from dealhub.domain.services.cursor_pager import CursorPager

logger = get_logger(__name__)

T = TypeVar("T")


def datetime_to_key(value: datetime) -> str:
    """Render a timestamp as a cursor key, normalised to naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


def key_to_datetime(key: str) -> datetime:
    """Parse a cursor key produced by :func:`datetime_to_key`."""
    return datetime.fromisoformat(key).replace(tzinfo=timezone.utc)


async def paginate(
    session: AsyncSession,
    stmt: Select[Any],
    *,
    pager: CursorPager,
    key_column: InstrumentedAttribute[Any],
    id_column: InstrumentedAttribute[int],
    cursor: str | None,
    limit: int | None,
    key_to_column: Callable[[str], Any] = key_to_datetime,
    column_to_key: Callable[[Any], str] = datetime_to_key,
) -> Page[Any]:
    """Fetch one page of ``stmt`` ordered by ``(key DESC, id DESC)``.

    Args:
        session: Store handle to run the query on.
        stmt: Select with the caller's filters already applied.
        pager: Pager that decodes the cursor and bounds the limit.
        key_column: Ordering key column.
        id_column: Unique tie-breaking id column.
        cursor: Cursor of the previous page; None or garbage means first page.
        limit: Requested page size (clamped by the pager).
        key_to_column: Converts a decoded key into a column value.
        column_to_key: Converts a column value into a cursor key.

    Returns:
        The page and, if it was full, the cursor of the next one.
    """
    page_size = pager.clamp_limit(limit)

    watermark = pager.decode(cursor)
    if watermark is not None:
        try:
            key_value = key_to_column(watermark.key)
        except ValueError:
            logger.debug("Ignoring cursor with unparseable key")
            key_value = None
        if key_value is not None:
            stmt = stmt.where(
                or_(
                    key_column < key_value,
                    and_(key_column == key_value, id_column < watermark.id),
                )
            )
    elif cursor:
        logger.debug("Ignoring malformed cursor")

    stmt = stmt.order_by(key_column.desc(), id_column.desc()).limit(page_size)
    result = await session.execute(stmt)
    rows = list(result.scalars().all())

    key_attr = key_column.key
    id_attr = id_column.key
    next_cursor = pager.next_cursor(
        rows,
        page_size,
        lambda row: (column_to_key(getattr(row, key_attr)), getattr(row, id_attr)),
    )
    return Page(items=rows, next_cursor=next_cursor)
