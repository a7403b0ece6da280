"""Write hooks tying subscription resources to their index entries."""

from datetime import datetime
from typing import Any

from loguru import logger

from app.models.resource import Resource
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE
from app.services.subscription_index_service import SubscriptionIndexService
from app.subscription.validator import SubscriptionValidator, parse_definition


class SubscriptionLifecycleHook:
    """Storage hooks for the Subscription resource type.

    Validation runs before every write, creates and updates alike. The
    index entry is created with the first version and dropped when a
    version carries a deletion timestamp.
    """

    resource_type = SUBSCRIPTION_RESOURCE_TYPE

    def __init__(
        self,
        validator: SubscriptionValidator,
        index_service: SubscriptionIndexService,
        log=logger,
    ):
        self.validator = validator
        self.index_service = index_service
        self.log = log

    async def before_write(self, content: dict[str, Any]) -> None:
        definition = parse_definition(content)
        descriptor = self.validator.validate(definition)
        self.log.debug(f"Subscription criteria watches {descriptor.name}")

    async def after_create(self, entity: Resource, content: dict[str, Any]) -> None:
        await self.index_service.create_entry(entity)

    async def after_write(
        self,
        entity: Resource,
        content: dict[str, Any],
        deleted_at: datetime | None,
    ) -> None:
        if deleted_at is not None:
            await self.index_service.delete_all_entries(entity)
