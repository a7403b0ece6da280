"""Subscription validation and lifecycle integration."""

from app.subscription.channel import ChannelValidator
from app.subscription.criteria import CriteriaParser, ParsedCriteria
from app.subscription.hooks import SubscriptionLifecycleHook
from app.subscription.validator import SubscriptionValidator

__all__ = [
    "ChannelValidator",
    "CriteriaParser",
    "ParsedCriteria",
    "SubscriptionLifecycleHook",
    "SubscriptionValidator",
]
