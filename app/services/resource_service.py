"""Versioned resource storage with per type write hooks."""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ResourceGoneError,
    ResourceNotFoundError,
    UnsupportedResourceTypeError,
)
from app.fhir.registry import HandlerRegistry, ResourceHandler
from app.models.resource import Resource, ResourceVersion, utcnow
from app.services.base_service import BaseService


class ResourceService(BaseService[Resource]):
    """Stores resource versions and drives the registered hooks.

    Every write runs in one transaction: ``before_write`` hooks, the row and
    version snapshot, then ``after_create`` / ``after_write`` hooks, then
    commit. An exception anywhere rolls the whole write back.
    """

    def __init__(self, db: AsyncSession, handlers: HandlerRegistry, log=logger):
        super().__init__(db, Resource, log)
        self.handlers = handlers

    async def read(
        self,
        resource_type: str,
        resource_id: str,
        include_deleted: bool = False,
    ) -> Resource | None:
        """Get the current row of a resource."""
        result = await self.db.execute(
            select(Resource).where(
                Resource.resource_type == resource_type,
                Resource.resource_id == resource_id,
            )
        )
        resource = result.scalar_one_or_none()
        if resource is None:
            return None
        if resource.is_deleted and not include_deleted:
            return None
        return resource

    async def history(self, resource_type: str, resource_id: str) -> list[ResourceVersion]:
        """Get all stored versions of a resource, oldest first."""
        resource = await self.read(resource_type, resource_id, include_deleted=True)
        if resource is None:
            raise ResourceNotFoundError(resource_type, resource_id)

        result = await self.db.execute(
            select(ResourceVersion)
            .where(ResourceVersion.resource_pid == resource.pid)
            .order_by(ResourceVersion.version)
        )
        return list(result.scalars().all())

    async def create(self, resource_type: str, content: dict[str, Any]) -> Resource:
        """Store the first version of a new resource."""
        handler = self._get_handler(resource_type)
        resource_id = str(uuid.uuid4())
        log = self.log.bind(resource_type=resource_type, resource_id=resource_id)

        async with self.transaction():
            for hook in handler.hooks:
                await hook.before_write(content)

            entity = Resource(
                resource_type=resource_type,
                resource_id=resource_id,
                version=1,
                updated_at=utcnow(),
            )
            entity.set_content({**content, "id": resource_id})
            await self.add(entity)
            await self.add(ResourceVersion.snapshot(entity))

            for hook in handler.hooks:
                await hook.after_create(entity, content)
            for hook in handler.hooks:
                await hook.after_write(entity, content, None)

        log.info(f"Created {entity.reference}")
        return entity

    async def update(
        self,
        resource_type: str,
        resource_id: str,
        content: dict[str, Any],
    ) -> Resource:
        """Store a new version of an existing resource."""
        handler = self._get_handler(resource_type)
        log = self.log.bind(resource_type=resource_type, resource_id=resource_id)

        async with self.transaction():
            entity = await self._get_live(resource_type, resource_id)

            for hook in handler.hooks:
                await hook.before_write(content)

            entity.version += 1
            entity.updated_at = utcnow()
            entity.set_content({**content, "id": resource_id})
            await self.db.flush()
            await self.add(ResourceVersion.snapshot(entity))

            for hook in handler.hooks:
                await hook.after_write(entity, content, None)

        log.info(f"Updated {entity.reference}")
        return entity

    async def delete(self, resource_type: str, resource_id: str) -> Resource:
        """Logically delete a resource, keeping its history."""
        handler = self._get_handler(resource_type)
        log = self.log.bind(resource_type=resource_type, resource_id=resource_id)

        async with self.transaction():
            entity = await self.read(resource_type, resource_id, include_deleted=True)
            if entity is None:
                raise ResourceNotFoundError(resource_type, resource_id)
            if entity.is_deleted:
                log.debug(f"{entity.reference} already deleted")
                return entity

            deleted_at = utcnow()
            entity.version += 1
            entity.updated_at = deleted_at
            entity.deleted_at = deleted_at
            await self.db.flush()
            await self.add(ResourceVersion.snapshot(entity))

            content = entity.get_content()
            for hook in handler.hooks:
                await hook.after_write(entity, content, deleted_at)

        log.info(f"Deleted {entity.reference}")
        return entity

    def _get_handler(self, resource_type: str) -> ResourceHandler:
        handler = self.handlers.get(resource_type)
        if handler is None:
            raise UnsupportedResourceTypeError(
                f"no storage handler for resource type: {resource_type}"
            )
        return handler

    async def _get_live(self, resource_type: str, resource_id: str) -> Resource:
        entity = await self.read(resource_type, resource_id, include_deleted=True)
        if entity is None:
            raise ResourceNotFoundError(resource_type, resource_id)
        if entity.is_deleted:
            raise ResourceGoneError(resource_type, resource_id)
        return entity
