"""Database models."""

from app.models.resource import Resource, ResourceVersion
from app.models.subscription import SubscriptionIndexEntry

__all__ = [
    "Resource",
    "ResourceVersion",
    "SubscriptionIndexEntry",
]
