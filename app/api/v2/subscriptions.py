"""Subscription resource API endpoints."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from app.core.deps import Subscriptions
from app.models.resource import Resource
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE
from app.schemas.subscription import (
    SubscriptionDTO,
    SubscriptionIndexEntryDTO,
    SubscriptionValidationResult,
    SubscriptionVersionDTO,
)
from app.subscription.validator import parse_definition

router = APIRouter()


async def _to_dto(ctx: Subscriptions, resource: Resource) -> SubscriptionDTO:
    return SubscriptionDTO(
        id=resource.resource_id,
        version=resource.version,
        last_updated=resource.updated_at,
        resource=resource.get_content(),
        index_entry_id=await ctx.index.lookup_entry_id(resource.resource_id),
    )


@router.post("", response_model=SubscriptionDTO, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    ctx: Subscriptions,
    resource: dict[str, Any] = Body(...),
) -> SubscriptionDTO:
    """
    Create subscription.

    - **criteria**: `{ResourceType}?[params]` query to watch
    - **status**: Subscription status
    - **channel**: Delivery channel (type, endpoint, payload)
    """
    created = await ctx.resources.create(SUBSCRIPTION_RESOURCE_TYPE, resource)
    return await _to_dto(ctx, created)


@router.post("/$validate", response_model=SubscriptionValidationResult)
async def validate_subscription(
    ctx: Subscriptions,
    resource: dict[str, Any] = Body(...),
) -> SubscriptionValidationResult:
    """Validate a subscription without storing it."""
    result = ctx.validator.inspect(parse_definition(resource))
    return SubscriptionValidationResult(
        resource_type=result.descriptor.name,
        criteria_params=result.criteria.params,
    )


@router.get("/{subscription_id}", response_model=SubscriptionDTO)
async def get_subscription(
    subscription_id: str,
    ctx: Subscriptions,
) -> SubscriptionDTO:
    """Get subscription by ID."""
    resource = await ctx.resources.read(
        SUBSCRIPTION_RESOURCE_TYPE, subscription_id, include_deleted=True
    )
    if not resource:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found",
        )
    if resource.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Subscription is deleted",
        )
    return await _to_dto(ctx, resource)


@router.put("/{subscription_id}", response_model=SubscriptionDTO)
async def update_subscription(
    subscription_id: str,
    ctx: Subscriptions,
    resource: dict[str, Any] = Body(...),
) -> SubscriptionDTO:
    """
    Update subscription.

    Stores a new version; the resource is validated again in full.
    """
    updated = await ctx.resources.update(
        SUBSCRIPTION_RESOURCE_TYPE, subscription_id, resource
    )
    return await _to_dto(ctx, updated)


@router.delete("/{subscription_id}")
async def delete_subscription(
    subscription_id: str,
    ctx: Subscriptions,
) -> dict:
    """
    Delete subscription.

    The resource is deleted logically and its index entry is removed.
    """
    deleted = await ctx.resources.delete(SUBSCRIPTION_RESOURCE_TYPE, subscription_id)
    return {"status": "success", "version": deleted.version}


@router.get("/{subscription_id}/_history", response_model=list[SubscriptionVersionDTO])
async def get_subscription_history(
    subscription_id: str,
    ctx: Subscriptions,
) -> list[SubscriptionVersionDTO]:
    """Get all stored versions of a subscription."""
    versions = await ctx.resources.history(SUBSCRIPTION_RESOURCE_TYPE, subscription_id)
    return [
        SubscriptionVersionDTO(
            version=v.version,
            updated_at=v.updated_at,
            deleted_at=v.deleted_at,
            resource=v.get_content(),
        )
        for v in versions
    ]


@router.get("/{subscription_id}/index", response_model=SubscriptionIndexEntryDTO)
async def get_subscription_index_entry(
    subscription_id: str,
    ctx: Subscriptions,
) -> SubscriptionIndexEntryDTO:
    """Get the index entry the delivery side uses for this subscription."""
    entry = await ctx.index.find_entry(subscription_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription index entry not found",
        )
    return SubscriptionIndexEntryDTO(
        id=entry.id,
        created_at=entry.created_at,
        resource_pid=entry.resource_pid,
    )
