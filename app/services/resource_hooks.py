"""Hook interface the storage engine calls around each resource write."""

from datetime import datetime
from typing import Any, Protocol

from app.models.resource import Resource


class ResourceHooks(Protocol):
    """Per resource type callbacks run inside the write transaction."""

    async def before_write(self, content: dict[str, Any]) -> None:
        """Run before anything is stored; raising aborts the write."""
        ...

    async def after_create(self, entity: Resource, content: dict[str, Any]) -> None:
        """Run once, after the first version has been assigned an identity."""
        ...

    async def after_write(
        self,
        entity: Resource,
        content: dict[str, Any],
        deleted_at: datetime | None,
    ) -> None:
        """Run after every version write; deleted_at is set for logical deletes."""
        ...
