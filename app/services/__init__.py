"""Service layer for business logic."""

from app.services.resource_hooks import ResourceHooks
from app.services.resource_service import ResourceService
from app.services.subscription_index_service import SubscriptionIndexService

__all__ = [
    "ResourceHooks",
    "ResourceService",
    "SubscriptionIndexService",
]
