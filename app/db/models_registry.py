"""
Model registry for table creation.

Import all models here to ensure they are registered with SQLAlchemy metadata.
"""

from app.db.base import Base
from app.models.resource import Resource, ResourceVersion
from app.models.subscription import SubscriptionIndexEntry

__all__ = [
    "Base",
    "Resource",
    "ResourceVersion",
    "SubscriptionIndexEntry",
]
