"""Pytest configuration for all tests."""

import os

# Must run before dealhub is imported: settings are cached on first use.
os.environ.setdefault("DEALHUB_ENVIRONMENT", "testing")
os.environ.setdefault("DEALHUB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEALHUB_LOG_LEVEL", "WARNING")
# Cheap Argon2 parameters keep the suite fast
os.environ.setdefault("DEALHUB_ARGON2_TIME_COST", "1")
os.environ.setdefault("DEALHUB_ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("DEALHUB_ARGON2_PARALLELISM", "1")

from typing import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from dealhub.core.config import Settings, get_settings  # noqa: E402
from dealhub.domain.entities import CodePurpose, TenantRole  # noqa: E402
from dealhub.infrastructure.auth import CodeSender, hash_password  # noqa: E402
from dealhub.infrastructure.persistence import models  # noqa: E402, F401
from dealhub.infrastructure.persistence.database import Base  # noqa: E402
from dealhub.infrastructure.persistence.models import CompanyModel, UserModel  # noqa: E402
from dealhub.infrastructure.persistence.repositories import CompanyRepository  # noqa: E402

DEFAULT_PASSWORD = "correct-pw"


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from dealhub.infrastructure.api.app import app
    from dealhub.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.state.session_factory = session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
    del app.state.session_factory


@pytest.fixture
def create_user(db_session: AsyncSession) -> Callable[..., Awaitable[UserModel]]:
    """Factory for persisted users; every user gets ``DEFAULT_PASSWORD``."""

    async def _create(
        email: str | None = None,
        mobile: str | None = None,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
    ) -> UserModel:
        user = UserModel(
            email=email,
            mobile=mobile,
            password_hash=hash_password(password),
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _create


@pytest.fixture
def create_company(db_session: AsyncSession) -> Callable[..., Awaitable[CompanyModel]]:
    """Factory for companies, optionally granting roles to other users."""

    async def _create(
        owner: UserModel,
        name: str = "Acme",
        members: dict[int, TenantRole] | None = None,
    ) -> CompanyModel:
        companies = CompanyRepository(db_session)
        company = await companies.create(CompanyModel(name=name, owner_user_id=owner.id))
        for user_id, role in (members or {}).items():
            await companies.set_member_role(company.id, user_id, role)
        await db_session.commit()
        return company

    return _create


@pytest_asyncio.fixture
async def alice(create_user) -> UserModel:
    return await create_user(email="alice@example.com", mobile="+15550001")


@pytest_asyncio.fixture
async def bob(create_user) -> UserModel:
    return await create_user(email="bob@example.com")


class RecordingCodeSender(CodeSender):
    """Keeps issued codes instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, CodePurpose, str]] = []

    async def send(self, user: UserModel, purpose: CodePurpose, code: str) -> None:
        self.sent.append((user.id, purpose, code))

    def last_code(self, purpose: CodePurpose) -> str:
        return next(code for _, p, code in reversed(self.sent) if p is purpose)


@pytest.fixture
def code_sender() -> RecordingCodeSender:
    return RecordingCodeSender()
