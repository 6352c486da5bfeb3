"""SQLAlchemy model for company memberships (per-company roles)."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealhub.infrastructure.persistence.database import Base


class CompanyMemberModel(Base):
    """Role of a user inside a company.

    Attributes:
        id: Auto-incrementing primary key.
        company_id: The company.
        user_id: The member.
        role: One of Owner, Manager, Staff.
        is_active: Inactive memberships grant no role.
        created_at: Used as the ordering key of member listings.
    """

    __tablename__ = "company_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    company = relationship("CompanyModel", back_populates="members")
    user = relationship("UserModel", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_company_members_user_company"),
    )

    def __repr__(self) -> str:
        return (
            f"<CompanyMember(company_id={self.company_id}, user_id={self.user_id}, "
            f"role={self.role})>"
        )
