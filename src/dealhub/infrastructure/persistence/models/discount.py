"""SQLAlchemy model for discounts published by companies."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealhub.infrastructure.persistence.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountModel(Base):
    """A discount offer.

    Attributes:
        id: Auto-incrementing primary key (pagination tie-breaker).
        company_id: Owning company.
        product_id: Discounted product, if the offer targets one.
        title: Headline of the offer.
        discount_percent: Percentage off, 1-100.
        status: ``active`` discounts appear in the public feed.
        created_at: Ordering key of feed pagination.
        updated_at: Last modification time.
    """

    __tablename__ = "discounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int | None] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    discount_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active", index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Discount(id={self.id}, company_id={self.company_id}, status={self.status})>"
