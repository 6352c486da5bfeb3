"""Discount repository for database operations."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.domain.entities import Page
from dealhub.domain.services import CursorPager
from dealhub.infrastructure.persistence.models import DiscountModel
from dealhub.infrastructure.persistence.pagination import paginate


@dataclass(frozen=True)
class DiscountFilters:
    """Filters accepted by the public discount feed."""

    company_id: int | None = None
    min_discount: int | None = None
    max_discount: int | None = None
    status: str | None = "active"


class DiscountRepository:
    """Repository for discount database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, discount: DiscountModel) -> DiscountModel:
        self.session.add(discount)
        await self.session.flush()
        return discount

    async def get_for_company(self, company_id: int, discount_id: int) -> DiscountModel | None:
        """Get a discount, scoped to the company that owns it."""
        result = await self.session.execute(
            select(DiscountModel).where(
                DiscountModel.id == discount_id,
                DiscountModel.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete(self, discount: DiscountModel) -> None:
        await self.session.delete(discount)
        await self.session.flush()

    async def list(
        self,
        filters: DiscountFilters,
        *,
        pager: CursorPager,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[DiscountModel]:
        """List discounts matching ``filters``, newest first.

        Args:
            filters: Feed filters; ``status=None`` lists every status.
            pager: Pager used to decode the cursor and bound the page size.
            cursor: Cursor returned with the previous page.
            limit: Requested page size.

        Returns:
            One page of discounts.
        """
        stmt = select(DiscountModel)
        if filters.status is not None:
            stmt = stmt.where(DiscountModel.status == filters.status)
        if filters.company_id is not None:
            stmt = stmt.where(DiscountModel.company_id == filters.company_id)
        if filters.min_discount is not None:
            stmt = stmt.where(DiscountModel.discount_percent >= filters.min_discount)
        if filters.max_discount is not None:
            stmt = stmt.where(DiscountModel.discount_percent <= filters.max_discount)

        return await paginate(
            self.session,
            stmt,
            pager=pager,
            key_column=DiscountModel.created_at,
            id_column=DiscountModel.id,
            cursor=cursor,
            limit=limit,
        )
