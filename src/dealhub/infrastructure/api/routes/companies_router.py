"""Company and membership API routes."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from dealhub.core.logging import get_logger
from dealhub.domain.entities import TenantRole
from dealhub.infrastructure.api.dependencies import (
    Authorizer,
    CompanyManager,
    DbSession,
    Pager,
    Principal,
)
from dealhub.infrastructure.api.schemas import (
    CompanyCreateRequest,
    CompanyResponse,
    MemberResponse,
    MemberRoleRequest,
    PageResponse,
)
from dealhub.infrastructure.auth import Forbidden
from dealhub.infrastructure.persistence.models import CompanyModel
from dealhub.infrastructure.persistence.repositories import CompanyRepository, UserRepository

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CompanyResponse,
    responses={401: {"description": "Not authenticated"}},
)
async def create_company(
    request: CompanyCreateRequest,
    principal: Principal,
    session: DbSession,
) -> CompanyResponse:
    """Create a company owned by the caller."""
    company = await CompanyRepository(session).create(
        CompanyModel(name=request.name, owner_user_id=principal.user_id)
    )
    await session.commit()

    logger.info("Company created", company_id=company.id, owner_user_id=principal.user_id)
    return CompanyResponse.model_validate(company)


@router.get(
    "/{company_id}/members",
    response_model=PageResponse[MemberResponse],
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of the company"},
    },
)
async def list_members(
    company_id: int,
    principal: Principal,
    authorizer: Authorizer,
    session: DbSession,
    pager: Pager,
    limit: Annotated[int | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
) -> PageResponse[MemberResponse]:
    """List the active members of a company. Any member may call this."""
    if await authorizer.get_tenant_role(principal.user_id, company_id) is None:
        raise Forbidden()

    page = await CompanyRepository(session).list_members(
        company_id, pager=pager, cursor=cursor, limit=limit
    )
    return PageResponse[MemberResponse](
        items=[MemberResponse.model_validate(member) for member in page.items],
        cursor=page.next_cursor,
    )


@router.put(
    "/{company_id}/members/{user_id}",
    response_model=MemberResponse,
    responses={
        403: {"description": "Insufficient permissions"},
        404: {"description": "User not found"},
        409: {"description": "The owner's role cannot be changed"},
    },
)
async def set_member_role(
    company_id: int,
    user_id: int,
    request: MemberRoleRequest,
    principal: CompanyManager,
    authorizer: Authorizer,
    session: DbSession,
) -> MemberResponse:
    """Grant a role to a user. Only an Owner may grant Owner."""
    if request.role is TenantRole.OWNER:
        caller_role = await authorizer.get_tenant_role(principal.user_id, company_id)
        if caller_role is not TenantRole.OWNER:
            raise Forbidden()

    if await UserRepository(session).get_by_id(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    companies = CompanyRepository(session)
    company = await companies.get_by_id(company_id)
    if company is not None and company.owner_user_id == user_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The owner's role cannot be changed",
        )

    member = await companies.set_member_role(company_id, user_id, request.role)
    await session.commit()

    logger.info(
        "Member role set",
        company_id=company_id,
        user_id=user_id,
        role=request.role.value,
        granted_by=principal.user_id,
    )
    return MemberResponse.model_validate(member)
