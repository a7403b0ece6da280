"""Subscription index model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.resource import utcnow

SUBSCRIPTION_RESOURCE_TYPE = "Subscription"


class SubscriptionIndexEntry(Base):
    """Index row pointing at a live Subscription resource.

    Read by the delivery side to find active subscriptions without scanning
    every stored resource. Rows are never updated in place.
    """

    __tablename__ = "subscription_index"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Lookup key only; the entry does not own the resource
    resource_pid: Mapped[int] = mapped_column(
        Integer, ForeignKey("resources.pid"), index=True
    )
