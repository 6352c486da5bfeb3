"""Repository for fixed-window attempt counters.

Counters live in the store so that every worker process shares them. An
increment is a single conditional UPDATE, so concurrent requests can never
read-modify-write past the budget.
"""

from datetime import datetime, timedelta

from sqlalchemy import case, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.infrastructure.persistence.models import RateLimitCounterModel


class RateLimitRepository:
    """Repository for rate limit counter operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def hit(self, key: str, window_seconds: int, now: datetime) -> int:
        """Count one attempt for ``key``.

        Starts a new window when the current one is older than
        ``window_seconds``.

        Args:
            key: Counter key.
            window_seconds: Window length.
            now: Current time.

        Returns:
            Number of attempts in the current window, this one included.
        """
        await self._ensure_row(key, now)

        window_expired = RateLimitCounterModel.window_started_at <= now - timedelta(
            seconds=window_seconds
        )
        await self._session.execute(
            update(RateLimitCounterModel)
            .where(RateLimitCounterModel.key == key)
            .values(
                count=case((window_expired, 1), else_=RateLimitCounterModel.count + 1),
                window_started_at=case(
                    (window_expired, now), else_=RateLimitCounterModel.window_started_at
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(
            select(RateLimitCounterModel.count).where(RateLimitCounterModel.key == key)
        )
        return result.scalar_one()

    async def reset(self, key: str) -> None:
        """Drop the counter for ``key``."""
        await self._session.execute(
            delete(RateLimitCounterModel).where(RateLimitCounterModel.key == key)
        )

    async def _ensure_row(self, key: str, now: datetime) -> None:
        values = {"key": key, "count": 0, "window_started_at": now}
        dialect = self._session.get_bind().dialect.name

        if dialect == "sqlite":
            stmt = sqlite.insert(RateLimitCounterModel).values(**values)
            await self._session.execute(stmt.on_conflict_do_nothing(index_elements=["key"]))
        elif dialect == "postgresql":
            stmt = postgresql.insert(RateLimitCounterModel).values(**values)
            await self._session.execute(stmt.on_conflict_do_nothing(index_elements=["key"]))
        else:
            exists = await self._session.execute(
                select(RateLimitCounterModel.key).where(RateLimitCounterModel.key == key)
            )
            if exists.scalar_one_or_none() is not None:
                return
            try:
                async with self._session.begin_nested():
                    self._session.add(RateLimitCounterModel(**values))
            except IntegrityError:
                # Another request created the row first
                pass
