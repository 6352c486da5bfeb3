"""Product repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.domain.entities import Page
from dealhub.domain.services import CursorPager
from dealhub.infrastructure.persistence.models import ProductModel
from dealhub.infrastructure.persistence.pagination import paginate


class ProductRepository:
    """Repository for product database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, product: ProductModel) -> ProductModel:
        self.session.add(product)
        await self.session.flush()
        return product

    async def get_for_company(self, company_id: int, product_id: int) -> ProductModel | None:
        """Get a product, scoped to the company that owns it."""
        result = await self.session.execute(
            select(ProductModel).where(
                ProductModel.id == product_id,
                ProductModel.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete(self, product: ProductModel) -> None:
        await self.session.delete(product)
        await self.session.flush()

    async def list_for_company(
        self,
        company_id: int,
        *,
        pager: CursorPager,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[ProductModel]:
        """List a company's products, newest first."""
        stmt = select(ProductModel).where(ProductModel.company_id == company_id)
        return await paginate(
            self.session,
            stmt,
            pager=pager,
            key_column=ProductModel.created_at,
            id_column=ProductModel.id,
            cursor=cursor,
            limit=limit,
        )
