"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from issue_tracker.core.config import IdAllocationSettings, Settings
from issue_tracker.database import get_db
from issue_tracker.main import app
from issue_tracker.properties.registry import PropertyRegistry, build_default_registry
from issue_tracker.services.counter_service import IdAllocationService
from issue_tracker.services.issue_service import IssueService
from issue_tracker.services.property_service import PropertyDefinitionService
from issue_tracker.services.query_service import IssueQueryService

# In-memory SQLite, one database per test; StaticPool keeps the single
# connection alive so every session sees the same tables
TEST_DATABASE_URL = "sqlite+aiosqlite://"

WORKSPACE = "ws-test"
OTHER_WORKSPACE = "ws-other"


@pytest.fixture
def test_settings() -> Settings:
    """Test settings: no backoff delay between allocation retries."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        debug=True,
        id_allocation=IdAllocationSettings(max_retries=3, backoff_min_ms=0, backoff_max_ms=0),
    )


@pytest.fixture
async def test_engine():
    """Create a fresh in-memory database with every table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Import all models explicitly to ensure they're registered with SQLModel.metadata
    from issue_tracker.models.counter import Counter  # noqa: F401
    from issue_tracker.models.issue import Issue  # noqa: F401
    from issue_tracker.models.property_definition import PropertyDefinition  # noqa: F401
    from issue_tracker.models.property_value import (  # noqa: F401
        PropertyMultiValue,
        PropertySingleValue,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session with the system properties seeded."""
    async_session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_factory() as session:
        await PropertyDefinitionService(session).ensure_system_properties()
        yield session


@pytest.fixture
def registry() -> PropertyRegistry:
    return build_default_registry()


@pytest.fixture
def allocator(db_session: AsyncSession, test_settings: Settings) -> IdAllocationService:
    return IdAllocationService(db_session, test_settings.id_allocation)


@pytest.fixture
def issue_service(
    db_session: AsyncSession,
    registry: PropertyRegistry,
    allocator: IdAllocationService,
    test_settings: Settings,
) -> IssueService:
    return IssueService(db_session, registry=registry, allocator=allocator, settings=test_settings)


@pytest.fixture
def query_service(
    db_session: AsyncSession,
    registry: PropertyRegistry,
    test_settings: Settings,
) -> IssueQueryService:
    return IssueQueryService(db_session, registry=registry, settings=test_settings)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client scoped to the test workspace."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Workspace-Id": WORKSPACE},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
