"""Repository for server-side access token records."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.infrastructure.persistence.models import AccessTokenModel
from dealhub.infrastructure.persistence.token_hashing import hash_token


class AccessTokenRepository:
    """Repository for access token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, token: str, *, jti: str, user_id: int, issued_at: datetime, expires_at: datetime
    ) -> AccessTokenModel:
        """Record a freshly issued access token.

        Args:
            token: The raw bearer value (only its hash is stored).
            jti: Token id claim.
            user_id: Subject of the token.
            issued_at: Issue time.
            expires_at: Expiry time.

        Returns:
            The stored model.
        """
        model = AccessTokenModel(
            token_hash=hash_token(token),
            jti=jti,
            user_id=user_id,
            created_at=issued_at,
            expires_at=expires_at,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def is_active(self, token: str, now: datetime) -> bool:
        """Check that a token has a live, unexpired server-side record."""
        result = await self._session.execute(
            select(AccessTokenModel.id)
            .where(
                AccessTokenModel.token_hash == hash_token(token),
                AccessTokenModel.expires_at > now,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def delete_by_token(self, token: str) -> bool:
        """Delete the record of a token.

        Returns:
            True if a record was deleted, False if none existed.
        """
        result = await self._session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.token_hash == hash_token(token))
        )
        return result.rowcount > 0

    async def delete_all_for_user(self, user_id: int) -> int:
        """Delete every access token record of a user.

        Returns:
            Number of records deleted.
        """
        result = await self._session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.user_id == user_id)
        )
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        """Delete records whose expiry has passed."""
        result = await self._session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.expires_at <= now)
        )
        return result.rowcount
