"""Repository for one-time code operations.

Provides issuing, single-use consumption and cleanup of activation and
password reset codes.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.domain.entities import CodePurpose
from dealhub.infrastructure.persistence.models import OneTimeCodeModel
from dealhub.infrastructure.persistence.token_hashing import hash_token


class OneTimeCodeRepository:
    """Repository for one-time code database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def create(
        self,
        code: str,
        *,
        user_id: int,
        purpose: CodePurpose,
        issued_at: datetime,
        expires_at: datetime,
    ) -> OneTimeCodeModel:
        """Store a new code, discarding earlier codes of the same purpose.

        Args:
            code: The raw code value (only its hash is stored).
            user_id: The user the code is issued for.
            purpose: What the code authorizes.
            issued_at: Issue time.
            expires_at: Expiry time.

        Returns:
            The stored model.
        """
        await self._session.execute(
            delete(OneTimeCodeModel).where(
                OneTimeCodeModel.user_id == user_id,
                OneTimeCodeModel.purpose == purpose.value,
            )
        )
        model = OneTimeCodeModel(
            user_id=user_id,
            purpose=purpose.value,
            code_hash=hash_token(code),
            created_at=issued_at,
            expires_at=expires_at,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def consume(self, code: str, purpose: CodePurpose, now: datetime) -> int | None:
        """Use up a code.

        Of several concurrent callers with the same code at most one succeeds.

        Returns:
            The id of the user the code was issued for, or None if the code
            is unknown, expired, already used or issued for another purpose.
        """
        result = await self._session.execute(
            select(OneTimeCodeModel.id, OneTimeCodeModel.user_id).where(
                OneTimeCodeModel.code_hash == hash_token(code),
                OneTimeCodeModel.purpose == purpose.value,
                OneTimeCodeModel.used_at.is_(None),
                OneTimeCodeModel.expires_at > now,
            )
        )
        row = result.one_or_none()
        if row is None:
            return None

        claimed = await self._session.execute(
            update(OneTimeCodeModel)
            .where(OneTimeCodeModel.id == row.id, OneTimeCodeModel.used_at.is_(None))
            .values(used_at=now)
        )
        return row.user_id if claimed.rowcount == 1 else None

    async def delete_expired(self, now: datetime) -> int:
        """Delete codes whose expiry has passed."""
        result = await self._session.execute(
            delete(OneTimeCodeModel).where(OneTimeCodeModel.expires_at <= now)
        )
        return result.rowcount
