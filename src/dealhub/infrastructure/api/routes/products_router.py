"""Product API routes, scoped to a company."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from dealhub.core.logging import get_logger
from dealhub.infrastructure.api.dependencies import CompanyManager, DbSession, Pager
from dealhub.infrastructure.api.schemas import (
    PageResponse,
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from dealhub.infrastructure.persistence.models import ProductModel
from dealhub.infrastructure.persistence.repositories import CompanyRepository, ProductRepository

logger = get_logger(__name__)

router = APIRouter()

_NOT_FOUND = {404: {"description": "Product not found"}}


async def _get_product_or_404(
    repo: ProductRepository, company_id: int, product_id: int
) -> ProductModel:
    product = await repo.get_for_company(company_id, product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.get(
    "/{company_id}/products",
    response_model=PageResponse[ProductResponse],
    responses={404: {"description": "Company not found"}},
)
async def list_products(
    company_id: int,
    session: DbSession,
    pager: Pager,
    limit: Annotated[int | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
) -> PageResponse[ProductResponse]:
    """List the products of a company, newest first. Public."""
    if await CompanyRepository(session).get_by_id(company_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    page = await ProductRepository(session).list_for_company(
        company_id, pager=pager, cursor=cursor, limit=limit
    )
    return PageResponse[ProductResponse](
        items=[ProductResponse.model_validate(product) for product in page.items],
        cursor=page.next_cursor,
    )


@router.post(
    "/{company_id}/products",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductResponse,
    responses={403: {"description": "Insufficient permissions"}},
)
async def create_product(
    company_id: int,
    request: ProductCreateRequest,
    principal: CompanyManager,
    session: DbSession,
) -> ProductResponse:
    """Create a product. Owner or Manager only."""
    product = await ProductRepository(session).create(
        ProductModel(company_id=company_id, **request.model_dump())
    )
    await session.commit()

    logger.info(
        "Product created",
        company_id=company_id,
        product_id=product.id,
        user_id=principal.user_id,
    )
    return ProductResponse.model_validate(product)


@router.patch(
    "/{company_id}/products/{product_id}",
    response_model=ProductResponse,
    responses={403: {"description": "Insufficient permissions"}, **_NOT_FOUND},
)
async def update_product(
    company_id: int,
    product_id: int,
    request: ProductUpdateRequest,
    principal: CompanyManager,
    session: DbSession,
) -> ProductResponse:
    """Update a product. Owner or Manager only."""
    repo = ProductRepository(session)
    product = await _get_product_or_404(repo, company_id, product_id)

    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    await session.flush()
    await session.commit()
    await session.refresh(product)

    logger.info("Product updated", product_id=product_id, user_id=principal.user_id)
    return ProductResponse.model_validate(product)


@router.delete(
    "/{company_id}/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"description": "Insufficient permissions"}, **_NOT_FOUND},
)
async def delete_product(
    company_id: int,
    product_id: int,
    principal: CompanyManager,
    session: DbSession,
) -> Response:
    """Delete a product. Owner or Manager only."""
    repo = ProductRepository(session)
    product = await _get_product_or_404(repo, company_id, product_id)
    await repo.delete(product)
    await session.commit()

    logger.info("Product deleted", product_id=product_id, user_id=principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
