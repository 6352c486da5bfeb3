"""SQLAlchemy model for the users table.

A user logs in with either their email or their mobile number; both are
unique across the platform.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealhub.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Auto-incrementing primary key.
        email: Email address (unique, optional when a mobile is set).
        mobile: Mobile number (unique, optional when an email is set).
        display_name: Optional name shown to other users.
        password_hash: Argon2id hash of the password.
        user_type: Platform-wide role embedded in access tokens.
        is_active: Whether the user can log in.
        created_at: Timestamp when the user was created.
        last_login: Timestamp of last successful login.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        index=True,
    )
    mobile: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        unique=True,
        index=True,
    )
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Argon2id password hash",
    )
    user_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="user",
        comment="Platform role embedded in access tokens",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    memberships: Mapped[list["CompanyMemberModel"]] = relationship(  # noqa: F821
        "CompanyMemberModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def identifier(self) -> str:
        """The identifier the user logs in with."""
        return self.email or self.mobile or str(self.id)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
