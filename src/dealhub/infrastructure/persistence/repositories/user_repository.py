"""User repository for database operations."""

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user."""
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int) -> UserModel | None:
        """Get a user by ID."""
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_identifier(self, identifier: str) -> UserModel | None:
        """Get a user by login identifier.

        Args:
            identifier: Email address or mobile number.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel)
            .where(or_(UserModel.email == identifier, UserModel.mobile == identifier))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update_last_login(self, user_id: int, when: datetime) -> None:
        """Update the last_login timestamp for a user."""
        await self.session.execute(
            update(UserModel).where(UserModel.id == user_id).values(last_login=when)
        )

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Store a new password hash for a user."""
        await self.session.execute(
            update(UserModel).where(UserModel.id == user_id).values(password_hash=password_hash)
        )

    async def activate(self, user_id: int) -> None:
        """Allow a user to log in."""
        await self.session.execute(
            update(UserModel).where(UserModel.id == user_id).values(is_active=True)
        )
