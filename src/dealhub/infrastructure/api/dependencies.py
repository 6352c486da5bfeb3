"""FastAPI dependencies for authentication, tenant authorization and paging.

Every request gets its own authorizer built on the request's database
session, so role checks always read the current store state.
"""

from typing import Annotated

from fastapi import Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.core.config import get_settings
from dealhub.domain.services import CursorPager
from dealhub.infrastructure.auth import (
    AccessClaims,
    CodeSender,
    Forbidden,
    LoggingCodeSender,
    TenantAuthorizer,
)
from dealhub.infrastructure.persistence.database import get_db_session

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_cursor_pager() -> CursorPager:
    """Pager bounded by the configured page sizes."""
    settings = get_settings()
    return CursorPager(
        default_limit=settings.pagination_default_limit,
        max_limit=settings.pagination_max_limit,
    )


def get_code_sender() -> CodeSender:
    """Sender for activation and password reset codes.

    Override this dependency to plug in an SMS or email provider.
    """
    return LoggingCodeSender(reveal_codes=get_settings().is_development)


Sender = Annotated[CodeSender, Depends(get_code_sender)]


async def get_tenant_authorizer(session: DbSession, code_sender: Sender) -> TenantAuthorizer:
    """Authorizer bound to the request's database session."""
    return TenantAuthorizer(session, settings=get_settings(), code_sender=code_sender)


Pager = Annotated[CursorPager, Depends(get_cursor_pager)]
Authorizer = Annotated[TenantAuthorizer, Depends(get_tenant_authorizer)]


async def get_current_principal(
    authorizer: Authorizer,
    authorization: Annotated[str | None, Header()] = None,
) -> AccessClaims:
    """Authenticate the request from its ``Authorization`` header.

    Raises:
        Unauthorized: Missing, invalid, expired or revoked token.
    """
    return await authorizer.authorize_request(authorization)


Principal = Annotated[AccessClaims, Depends(get_current_principal)]


async def require_company_manager(
    principal: Principal,
    authorizer: Authorizer,
    company_id: Annotated[int, Path()],
) -> AccessClaims:
    """Require the caller to be an Owner or Manager of ``company_id``.

    Raises:
        Forbidden: The caller has no mutating role in the company.
    """
    decision = await authorizer.authorize_tenant_mutation(principal.user_id, company_id)
    if not decision.allowed:
        raise Forbidden()
    return principal


CompanyManager = Annotated[AccessClaims, Depends(require_company_manager)]
