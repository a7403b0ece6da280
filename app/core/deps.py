"""FastAPI dependencies for dependency injection."""

import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_resource_types_config, get_settings
from app.db.session import async_session_maker
from app.fhir.registry import (
    DEFAULT_RESOURCE_TYPES,
    HandlerRegistry,
    ResourceHandler,
    ResourceTypeRegistry,
)
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE
from app.services.resource_service import ResourceService
from app.services.subscription_index_service import SubscriptionIndexService
from app.subscription.hooks import SubscriptionLifecycleHook
from app.subscription.validator import SubscriptionValidator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def get_request_log(request: Request):
    """Logger bound to the current request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    return logger.bind(request_id=request_id)


@lru_cache
def get_type_registry() -> ResourceTypeRegistry:
    """Get cached resource type registry."""
    configured = get_resource_types_config().resource_types
    return ResourceTypeRegistry(configured or DEFAULT_RESOURCE_TYPES)


@dataclass
class SubscriptionContext:
    """Components serving one unit of work on one session."""

    resources: ResourceService
    validator: SubscriptionValidator
    index: SubscriptionIndexService


def build_subscription_context(
    db: AsyncSession,
    settings: Settings | None = None,
    type_registry: ResourceTypeRegistry | None = None,
    log=logger,
) -> SubscriptionContext:
    """Wire the storage engine, validator and index service for a session."""
    settings = settings or get_settings()
    type_registry = type_registry or get_type_registry()

    handlers = HandlerRegistry(
        ResourceHandler(resource_type) for resource_type in settings.stored_resource_types
    )
    validator = SubscriptionValidator(type_registry, handlers, log=log)
    index = SubscriptionIndexService(db, log=log)
    handlers.add_hooks(
        SUBSCRIPTION_RESOURCE_TYPE,
        SubscriptionLifecycleHook(validator, index, log=log),
    )

    return SubscriptionContext(
        resources=ResourceService(db, handlers, log=log),
        validator=validator,
        index=index,
    )


async def get_subscription_context(
    db: Annotated[AsyncSession, Depends(get_db)],
    log=Depends(get_request_log),
) -> SubscriptionContext:
    """Per request subscription components."""
    return build_subscription_context(db, log=log)


# Type aliases for cleaner dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
Subscriptions = Annotated[SubscriptionContext, Depends(get_subscription_context)]
