"""Pydantic schemas for resource parsing and API responses."""

from app.schemas.subscription import (
    SubscriptionChannel,
    SubscriptionChannelType,
    SubscriptionDefinition,
    SubscriptionDTO,
    SubscriptionIndexEntryDTO,
    SubscriptionStatus,
    SubscriptionValidationResult,
    SubscriptionVersionDTO,
)

__all__ = [
    "SubscriptionChannel",
    "SubscriptionChannelType",
    "SubscriptionDefinition",
    "SubscriptionDTO",
    "SubscriptionIndexEntryDTO",
    "SubscriptionStatus",
    "SubscriptionValidationResult",
    "SubscriptionVersionDTO",
]
