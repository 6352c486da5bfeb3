"""SQLAlchemy model for the companies table.

A company is the tenant that owns products and discounts.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealhub.infrastructure.persistence.database import Base


class CompanyModel(Base):
    """SQLAlchemy model for the companies table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Display name.
        owner_user_id: The user who owns the company; always resolves to the
            Owner role regardless of membership rows.
        created_at: Timestamp when the company was created.
    """

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    members: Mapped[list["CompanyMemberModel"]] = relationship(  # noqa: F821
        "CompanyMemberModel",
        back_populates="company",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"
