"""SQLAlchemy model for issued access tokens.

A signed access token is only honoured while its row exists, which is what
makes logout and bulk revocation immediate.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealhub.infrastructure.persistence.database import Base


class AccessTokenModel(Base):
    """Server-side record of a live access token.

    Attributes:
        id: Auto-incrementing primary key.
        token_hash: SHA-256 of the bearer value (unique lookup key).
        jti: Token id claim, for auditing.
        user_id: Subject of the token.
        created_at: Issue time.
        expires_at: Expiry time (mirrors the ``exp`` claim).
    """

    __tablename__ = "access_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    jti: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
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

    def __repr__(self) -> str:
        return f"<AccessToken(id={self.id}, user_id={self.user_id}, jti={self.jti})>"
