"""Subscription index service keeping index rows in step with subscriptions."""

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import IndexInconsistencyError
from app.models.resource import Resource, utcnow
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE, SubscriptionIndexEntry
from app.services.base_service import BaseService


class SubscriptionIndexService(BaseService[SubscriptionIndexEntry]):
    """Creates, finds and removes subscription index entries.

    All mutations are flushed into the caller's transaction so that they
    commit or roll back together with the subscription resource write.
    """

    def __init__(self, db: AsyncSession, log=logger):
        super().__init__(db, SubscriptionIndexEntry, log)

    async def create_entry(self, entity: Resource) -> SubscriptionIndexEntry:
        """Create the index entry for a newly stored subscription."""
        entry = SubscriptionIndexEntry(created_at=utcnow(), resource_pid=entity.pid)
        await self.add(entry)
        self.log.info(f"Created subscription index entry {entry.id} for {entity.reference}")
        return entry

    async def find_entry(self, resource_id: str) -> SubscriptionIndexEntry | None:
        """Find the index entry for the latest version of a subscription."""
        resource = await self._get_subscription(resource_id)
        if resource is None:
            return None

        result = await self.db.execute(
            select(SubscriptionIndexEntry)
            .where(SubscriptionIndexEntry.resource_pid == resource.pid)
            .order_by(SubscriptionIndexEntry.id)
        )
        return result.scalars().first()

    async def lookup_entry_id(self, resource_id: str) -> int | None:
        """Get the index entry id for a subscription, if any."""
        entry = await self.find_entry(resource_id)
        if entry is None:
            return None
        return entry.id

    async def count_entries(self, resource_id: str) -> int:
        """Count index entries referencing a subscription."""
        resource = await self._get_subscription(resource_id)
        if resource is None:
            return 0

        return await self.count(SubscriptionIndexEntry.resource_pid == resource.pid)

    async def delete_all_entries(self, entity: Resource) -> int:
        """Remove every index entry of a logically deleted subscription.

        Returns the number of removed entries; 0 when there was nothing to
        remove.
        """
        if entity.deleted_at is None:
            self.log.error(
                f"Refusing to drop index entries for {entity.reference}: resource is not deleted"
            )
            raise IndexInconsistencyError(
                f"{entity.resource_type}/{entity.resource_id} has no deletion in this transaction"
            )

        entry = await self.find_entry(entity.resource_id)
        if entry is None:
            self.log.debug(f"No subscription index entry for {entity.reference}")
            return 0

        # Single statement so stale duplicates go together with the live entry
        result = await self.db.execute(
            delete(SubscriptionIndexEntry).where(
                SubscriptionIndexEntry.resource_pid == entity.pid
            )
        )
        self.log.info(f"Removed {result.rowcount} subscription index entries for {entity.reference}")
        return result.rowcount

    async def _get_subscription(self, resource_id: str) -> Resource | None:
        result = await self.db.execute(
            select(Resource).where(
                Resource.resource_type == SUBSCRIPTION_RESOURCE_TYPE,
                Resource.resource_id == resource_id,
            )
        )
        return result.scalar_one_or_none()
