"""Discount API routes.

The public feed lists active discounts of every company; the company-scoped
routes manage one company's discounts.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from dealhub.core.logging import get_logger
from dealhub.infrastructure.api.dependencies import CompanyManager, DbSession, Pager
from dealhub.infrastructure.api.schemas import (
    DiscountCreateRequest,
    DiscountResponse,
    DiscountUpdateRequest,
    PageResponse,
)
from dealhub.infrastructure.persistence.models import DiscountModel
from dealhub.infrastructure.persistence.repositories import (
    DiscountFilters,
    DiscountRepository,
    ProductRepository,
)

logger = get_logger(__name__)

router = APIRouter()

_NOT_FOUND = {404: {"description": "Discount not found"}}


def _page_response(page) -> PageResponse[DiscountResponse]:
    return PageResponse[DiscountResponse](
        items=[DiscountResponse.model_validate(discount) for discount in page.items],
        cursor=page.next_cursor,
    )


async def _get_discount_or_404(
    repo: DiscountRepository, company_id: int, discount_id: int
) -> DiscountModel:
    discount = await repo.get_for_company(company_id, discount_id)
    if discount is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Discount not found")
    return discount


@router.get("/discounts", response_model=PageResponse[DiscountResponse])
async def list_discount_feed(
    session: DbSession,
    pager: Pager,
    limit: Annotated[int | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
    min_discount: Annotated[int | None, Query(ge=0, le=100)] = None,
    max_discount: Annotated[int | None, Query(ge=0, le=100)] = None,
    company_id: Annotated[int | None, Query()] = None,
) -> PageResponse[DiscountResponse]:
    """List active discounts, newest first. Public.

    An unreadable cursor restarts the listing from the first page.
    """
    filters = DiscountFilters(
        company_id=company_id,
        min_discount=min_discount,
        max_discount=max_discount,
    )
    page = await DiscountRepository(session).list(
        filters, pager=pager, cursor=cursor, limit=limit
    )
    return _page_response(page)


@router.get(
    "/companies/{company_id}/discounts",
    response_model=PageResponse[DiscountResponse],
    responses={403: {"description": "Insufficient permissions"}},
)
async def list_company_discounts(
    company_id: int,
    principal: CompanyManager,
    session: DbSession,
    pager: Pager,
    limit: Annotated[int | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
) -> PageResponse[DiscountResponse]:
    """List every discount of a company, inactive ones included."""
    page = await DiscountRepository(session).list(
        DiscountFilters(company_id=company_id, status=None),
        pager=pager,
        cursor=cursor,
        limit=limit,
    )
    return _page_response(page)


@router.post(
    "/companies/{company_id}/discounts",
    status_code=status.HTTP_201_CREATED,
    response_model=DiscountResponse,
    responses={
        403: {"description": "Insufficient permissions"},
        404: {"description": "Product not found"},
    },
)
async def create_discount(
    company_id: int,
    request: DiscountCreateRequest,
    principal: CompanyManager,
    session: DbSession,
) -> DiscountResponse:
    """Create a discount. Owner or Manager only."""
    if request.product_id is not None:
        product = await ProductRepository(session).get_for_company(company_id, request.product_id)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    discount = await DiscountRepository(session).create(
        DiscountModel(company_id=company_id, **request.model_dump())
    )
    await session.commit()

    logger.info(
        "Discount created",
        company_id=company_id,
        discount_id=discount.id,
        user_id=principal.user_id,
    )
    return DiscountResponse.model_validate(discount)


@router.patch(
    "/companies/{company_id}/discounts/{discount_id}",
    response_model=DiscountResponse,
    responses={403: {"description": "Insufficient permissions"}, **_NOT_FOUND},
)
async def update_discount(
    company_id: int,
    discount_id: int,
    request: DiscountUpdateRequest,
    principal: CompanyManager,
    session: DbSession,
) -> DiscountResponse:
    """Update a discount. Owner or Manager only."""
    repo = DiscountRepository(session)
    discount = await _get_discount_or_404(repo, company_id, discount_id)

    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(discount, field, value)
    await session.flush()
    await session.commit()
    await session.refresh(discount)

    logger.info("Discount updated", discount_id=discount_id, user_id=principal.user_id)
    return DiscountResponse.model_validate(discount)


@router.delete(
    "/companies/{company_id}/discounts/{discount_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"description": "Insufficient permissions"}, **_NOT_FOUND},
)
async def delete_discount(
    company_id: int,
    discount_id: int,
    principal: CompanyManager,
    session: DbSession,
) -> Response:
    """Delete a discount. Owner or Manager only."""
    repo = DiscountRepository(session)
    discount = await _get_discount_or_404(repo, company_id, discount_id)
    await repo.delete(discount)
    await session.commit()

    logger.info("Discount deleted", discount_id=discount_id, user_id=principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
