"""SQLAlchemy model for refresh tokens.

Refresh tokens are opaque random strings stored by hash. Each one is
single-use: rotation revokes it and links it to its replacement.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealhub.infrastructure.persistence.database import Base


class RefreshTokenModel(Base):
    """Refresh token model for rotation and reuse detection.

    Attributes:
        id: Auto-incrementing primary key.
        token_hash: SHA-256 of the token value (unique lookup key).
        user_id: The user the token is bound to.
        created_at: Issue time.
        expires_at: Expiry time.
        revoked: Set once the token is rotated or bulk-revoked.
        replaced_by_id: Row that replaced this one on rotation.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    replaced_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("refresh_tokens.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"RefreshTokenModel(id={self.id!r}, user_id={self.user_id!r}, "
            f"revoked={self.revoked!r})"
        )
