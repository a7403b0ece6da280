"""Pytest configuration and fixtures."""

import copy
from typing import Any, AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings
from app.core.deps import SubscriptionContext, build_subscription_context, get_db
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.fhir.registry import ResourceTypeRegistry
from app.main import app
from app.models.resource import Resource
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_SUBSCRIPTION: dict[str, Any] = {
    "resourceType": "Subscription",
    "status": "active",
    "reason": "Notify on patient changes",
    "criteria": "Patient?name=smith",
    "channel": {
        "type": "rest-hook",
        "endpoint": "http://x",
        "payload": "application/fhir+json",
    },
}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    """Settings with the default stored resource types."""
    return Settings(_env_file=None)


@pytest.fixture
def type_registry() -> ResourceTypeRegistry:
    """Registry with the built-in resource types."""
    return ResourceTypeRegistry()


@pytest.fixture
def ctx(
    db_session: AsyncSession,
    settings: Settings,
    type_registry: ResourceTypeRegistry,
) -> SubscriptionContext:
    """Storage engine, validator and index service on the test session."""
    return build_subscription_context(
        db_session, settings=settings, type_registry=type_registry
    )


@pytest.fixture
def subscription_factory() -> Callable[..., dict[str, Any]]:
    """Build subscription resource bodies, overriding top level or channel keys."""

    def factory(channel: dict[str, Any] | None = None, **overrides: Any) -> dict[str, Any]:
        resource = copy.deepcopy(VALID_SUBSCRIPTION)
        if channel is not None:
            resource["channel"].update(channel)
        for key, value in overrides.items():
            if value is None:
                resource.pop(key, None)
            else:
                resource[key] = value
        return resource

    return factory


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def sample_subscription(
    ctx: SubscriptionContext, subscription_factory
) -> Resource:
    """Create a stored subscription."""
    return await ctx.resources.create(SUBSCRIPTION_RESOURCE_TYPE, subscription_factory())


@pytest_asyncio.fixture(scope="function")
async def sample_patient(ctx: SubscriptionContext) -> Resource:
    """Create a stored patient."""
    return await ctx.resources.create(
        "Patient",
        {"resourceType": "Patient", "name": [{"family": "Smith"}]},
    )
