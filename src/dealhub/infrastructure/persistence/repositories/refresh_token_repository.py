"""Repository for refresh token operations.

Provides storage, lookup, rotation and bulk revocation of refresh tokens.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.infrastructure.persistence.models import RefreshTokenModel
from dealhub.infrastructure.persistence.token_hashing import hash_token


class RefreshTokenRepository:
    """Repository for refresh token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def create(
        self, token: str, *, user_id: int, issued_at: datetime, expires_at: datetime
    ) -> RefreshTokenModel:
        """Store a new refresh token.

        Args:
            token: The raw token value (only its hash is stored).
            user_id: The user the token is bound to.
            issued_at: Issue time.
            expires_at: Expiry time.

        Returns:
            The stored model with its id populated.
        """
        model = RefreshTokenModel(
            token_hash=hash_token(token),
            user_id=user_id,
            created_at=issued_at,
            expires_at=expires_at,
            revoked=False,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_token(self, token: str) -> RefreshTokenModel | None:
        """Look up a refresh token by its raw value."""
        result = await self._session.execute(
            select(RefreshTokenModel).where(RefreshTokenModel.token_hash == hash_token(token))
        )
        return result.scalar_one_or_none()

    async def get_active(self, token: str, now: datetime) -> RefreshTokenModel | None:
        """Look up a refresh token that is neither revoked nor expired."""
        result = await self._session.execute(
            select(RefreshTokenModel).where(
                RefreshTokenModel.token_hash == hash_token(token),
                RefreshTokenModel.revoked.is_(False),
                RefreshTokenModel.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def revoke_if_active(self, token_id: int, replaced_by_id: int | None = None) -> bool:
        """Revoke a token unless somebody else already did.

        Of several concurrent callers for the same token at most one succeeds.

        Returns:
            True if this call revoked the token, False if it was already revoked.
        """
        result = await self._session.execute(
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.id == token_id,
                RefreshTokenModel.revoked.is_(False),
            )
            .values(revoked=True, replaced_by_id=replaced_by_id)
        )
        return result.rowcount == 1

    async def revoke_all_for_user(self, user_id: int) -> int:
        """Revoke all live refresh tokens of a user.

        Returns:
            Number of tokens revoked.
        """
        result = await self._session.execute(
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.revoked.is_(False),
            )
            .values(revoked=True)
        )
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry has passed.

        References from older rows are cleared by ``ON DELETE SET NULL``.
        """
        result = await self._session.execute(
            delete(RefreshTokenModel).where(RefreshTokenModel.expires_at <= now)
        )
        return result.rowcount
