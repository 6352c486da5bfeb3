"""Repository for companies and their memberships."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealhub.domain.entities import Page, TenantRole
from dealhub.domain.services import CursorPager
from dealhub.infrastructure.persistence.models import CompanyMemberModel, CompanyModel
from dealhub.infrastructure.persistence.pagination import paginate


class CompanyRepository:
    """Repository for company and membership database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, company: CompanyModel) -> CompanyModel:
        """Create a company and record its owner as an Owner member."""
        self.session.add(company)
        await self.session.flush()
        self.session.add(
            CompanyMemberModel(
                company_id=company.id,
                user_id=company.owner_user_id,
                role=TenantRole.OWNER.value,
            )
        )
        await self.session.flush()
        return company

    async def get_by_id(self, company_id: int) -> CompanyModel | None:
        result = await self.session.execute(
            select(CompanyModel).where(CompanyModel.id == company_id)
        )
        return result.scalar_one_or_none()

    async def get_user_role(self, user_id: int, company_id: int) -> TenantRole | None:
        """Resolve the role of a user in a company.

        The owner column wins over membership rows; otherwise the active
        membership decides. Unknown role strings grant nothing.

        Returns:
            The role, or None if the user has no role in the company.
        """
        owner = await self.session.execute(
            select(CompanyModel.owner_user_id).where(CompanyModel.id == company_id)
        )
        owner_user_id = owner.scalar_one_or_none()
        if owner_user_id is None:
            return None
        if owner_user_id == user_id:
            return TenantRole.OWNER

        result = await self.session.execute(
            select(CompanyMemberModel.role)
            .where(
                CompanyMemberModel.company_id == company_id,
                CompanyMemberModel.user_id == user_id,
                CompanyMemberModel.is_active.is_(True),
            )
            .limit(1)
        )
        role = result.scalar_one_or_none()
        if role is None:
            return None
        try:
            return TenantRole(role)
        except ValueError:
            return None

    async def get_member(self, company_id: int, user_id: int) -> CompanyMemberModel | None:
        result = await self.session.execute(
            select(CompanyMemberModel).where(
                CompanyMemberModel.company_id == company_id,
                CompanyMemberModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def set_member_role(
        self, company_id: int, user_id: int, role: TenantRole
    ) -> CompanyMemberModel:
        """Grant ``role`` to a user, creating or reactivating the membership."""
        member = await self.get_member(company_id, user_id)
        if member is None:
            member = CompanyMemberModel(company_id=company_id, user_id=user_id, role=role.value)
            self.session.add(member)
        else:
            member.role = role.value
            member.is_active = True
        await self.session.flush()
        return member

    async def list_members(
        self,
        company_id: int,
        *,
        pager: CursorPager,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[CompanyMemberModel]:
        """List active members, newest first."""
        stmt = select(CompanyMemberModel).where(
            CompanyMemberModel.company_id == company_id,
            CompanyMemberModel.is_active.is_(True),
        )
        return await paginate(
            self.session,
            stmt,
            pager=pager,
            key_column=CompanyMemberModel.created_at,
            id_column=CompanyMemberModel.id,
            cursor=cursor,
            limit=limit,
        )
