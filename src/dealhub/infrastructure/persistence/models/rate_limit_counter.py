"""SQLAlchemy model for fixed-window attempt counters.

Shared by the login throttle (keyed by identifier) and the request rate
limiter (keyed by client address and path).
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealhub.infrastructure.persistence.database import Base


class RateLimitCounterModel(Base):
    """Attempt counter for one key.

    Attributes:
        key: Counter key, e.g. ``login:alice@example.com``.
        count: Attempts seen in the current window.
        window_started_at: Start of the current window.
    """

    __tablename__ = "rate_limit_counters"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    window_started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<RateLimitCounter(key={self.key}, count={self.count})>"
