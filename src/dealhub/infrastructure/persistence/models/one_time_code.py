"""SQLAlchemy model for one-time codes.

Codes confirm a self-registered account or authorize a password reset.
Only the hash of a code is stored; each code is accepted at most once.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealhub.infrastructure.persistence.database import Base


class OneTimeCodeModel(Base):
    """One-time code model.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: The user the code was issued for.
        purpose: What the code may be used for (see ``CodePurpose``).
        code_hash: SHA-256 of the code value (unique lookup key).
        created_at: Issue time.
        expires_at: Expiry time.
        used_at: Set when the code is consumed.
    """

    __tablename__ = "one_time_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    purpose: Mapped[str] = mapped_column(String(32), nullable=False)
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_one_time_codes_user_purpose", "user_id", "purpose"),)

    def __repr__(self) -> str:
        return (
            f"OneTimeCodeModel(id={self.id!r}, user_id={self.user_id!r}, "
            f"purpose={self.purpose!r})"
        )
