"""Tests for the versioned storage engine and subscription write hooks."""

import pytest
from sqlalchemy import func, select

from app.core.deps import SubscriptionContext
from app.core.exceptions import (
    IndexInconsistencyError,
    ResourceGoneError,
    ResourceNotFoundError,
    UnsupportedResourceTypeError,
    ValidationError,
)
from app.models.resource import Resource, ResourceVersion, utcnow
from app.models.subscription import SubscriptionIndexEntry


async def count(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_subscription(ctx: SubscriptionContext, subscription_factory):
    """Test creating a subscription stores version 1 and one index entry."""
    resource = await ctx.resources.create("Subscription", subscription_factory())

    assert resource.version == 1
    assert resource.deleted_at is None
    assert resource.get_content()["id"] == resource.resource_id
    assert resource.get_content()["criteria"] == "Patient?name=smith"
    assert await ctx.index.count_entries(resource.resource_id) == 1


@pytest.mark.asyncio
async def test_invalid_subscription_not_stored(
    ctx: SubscriptionContext, db_session, subscription_factory
):
    """Test a rejected write leaves no resource, version or index row."""
    with pytest.raises(ValidationError) as exc_info:
        await ctx.resources.create("Subscription", subscription_factory(criteria="Patient"))

    assert "must be in the form" in exc_info.value.reason
    assert await count(db_session, Resource) == 0
    assert await count(db_session, ResourceVersion) == 0
    assert await count(db_session, SubscriptionIndexEntry) == 0


@pytest.mark.asyncio
async def test_index_failure_rolls_back_resource(
    ctx: SubscriptionContext, db_session, subscription_factory, monkeypatch
):
    """Test a failing index write leaves the subscription invisible."""
    created_ids = []

    async def failing_create_entry(entity):
        created_ids.append(entity.resource_id)
        raise RuntimeError("index table unavailable")

    monkeypatch.setattr(ctx.index, "create_entry", failing_create_entry)

    with pytest.raises(RuntimeError):
        await ctx.resources.create("Subscription", subscription_factory())

    assert len(created_ids) == 1
    assert await ctx.resources.read("Subscription", created_ids[0]) is None
    assert await ctx.resources.read("Subscription", created_ids[0], include_deleted=True) is None
    assert await count(db_session, Resource) == 0
    assert await count(db_session, SubscriptionIndexEntry) == 0


@pytest.mark.asyncio
async def test_updates_keep_single_entry(
    ctx: SubscriptionContext, sample_subscription: Resource, subscription_factory
):
    """Test non-deleting updates never duplicate the index entry."""
    entry = await ctx.index.find_entry(sample_subscription.resource_id)

    for i in range(5):
        updated = await ctx.resources.update(
            "Subscription",
            sample_subscription.resource_id,
            subscription_factory(criteria=f"Observation?code={i}"),
        )

    assert updated.version == 6
    assert await ctx.index.count_entries(sample_subscription.resource_id) == 1
    assert await ctx.index.lookup_entry_id(sample_subscription.resource_id) == entry.id


@pytest.mark.asyncio
async def test_update_is_revalidated(
    ctx: SubscriptionContext, sample_subscription: Resource, subscription_factory
):
    """Test updates get the same validation as creates."""
    subscription_id = sample_subscription.resource_id

    with pytest.raises(ValidationError) as exc_info:
        await ctx.resources.update(
            "Subscription",
            subscription_id,
            subscription_factory(channel={"payload": "bogus/type"}),
        )

    assert exc_info.value.reason == "invalid value for channel.payload: bogus/type"

    current = await ctx.resources.read("Subscription", subscription_id)
    assert current.version == 1
    assert current.get_content()["channel"]["payload"] == "application/fhir+json"


@pytest.mark.asyncio
async def test_delete_removes_entry(ctx: SubscriptionContext, sample_subscription: Resource):
    """Test logical delete drops the index entry but keeps history."""
    deleted = await ctx.resources.delete("Subscription", sample_subscription.resource_id)

    assert deleted.is_deleted
    assert deleted.version == 2
    assert await ctx.index.find_entry(sample_subscription.resource_id) is None
    assert await ctx.resources.read("Subscription", sample_subscription.resource_id) is None

    history = await ctx.resources.history("Subscription", sample_subscription.resource_id)
    assert [v.version for v in history] == [1, 2]
    assert history[0].deleted_at is None
    assert history[1].deleted_at is not None


@pytest.mark.asyncio
async def test_delete_twice_is_noop(ctx: SubscriptionContext, sample_subscription: Resource):
    """Test deleting an already deleted subscription changes nothing."""
    first = await ctx.resources.delete("Subscription", sample_subscription.resource_id)
    second = await ctx.resources.delete("Subscription", sample_subscription.resource_id)

    assert second.version == first.version == 2
    assert await ctx.index.find_entry(sample_subscription.resource_id) is None


@pytest.mark.asyncio
async def test_recreate_gets_new_entry(
    ctx: SubscriptionContext, sample_subscription: Resource, subscription_factory
):
    """Test a new subscription with the same criteria is indexed independently."""
    old_entry_id = await ctx.index.lookup_entry_id(sample_subscription.resource_id)
    await ctx.resources.delete("Subscription", sample_subscription.resource_id)

    recreated = await ctx.resources.create("Subscription", subscription_factory())
    new_entry = await ctx.index.find_entry(recreated.resource_id)

    assert recreated.resource_id != sample_subscription.resource_id
    assert new_entry is not None
    assert new_entry.id != old_entry_id
    assert new_entry.resource_pid == recreated.pid
    assert await ctx.index.find_entry(sample_subscription.resource_id) is None


@pytest.mark.asyncio
async def test_update_missing_resource(ctx: SubscriptionContext, subscription_factory):
    with pytest.raises(ResourceNotFoundError):
        await ctx.resources.update("Subscription", "missing", subscription_factory())


@pytest.mark.asyncio
async def test_update_deleted_resource(
    ctx: SubscriptionContext, sample_subscription: Resource, subscription_factory
):
    """Test a deleted subscription cannot be updated."""
    subscription_id = sample_subscription.resource_id
    await ctx.resources.delete("Subscription", subscription_id)

    with pytest.raises(ResourceGoneError):
        await ctx.resources.update("Subscription", subscription_id, subscription_factory())
    assert await ctx.index.count_entries(subscription_id) == 0


@pytest.mark.asyncio
async def test_delete_missing_resource(ctx: SubscriptionContext):
    with pytest.raises(ResourceNotFoundError):
        await ctx.resources.delete("Subscription", "missing")


@pytest.mark.asyncio
async def test_history_missing_resource(ctx: SubscriptionContext):
    with pytest.raises(ResourceNotFoundError):
        await ctx.resources.history("Subscription", "missing")


@pytest.mark.asyncio
async def test_unsupported_resource_type(ctx: SubscriptionContext):
    """Test writes to types without a storage handler."""
    with pytest.raises(UnsupportedResourceTypeError):
        await ctx.resources.create("Basic", {"resourceType": "Basic"})


@pytest.mark.asyncio
async def test_other_resource_types_have_no_index(
    ctx: SubscriptionContext, db_session, sample_patient: Resource
):
    """Test resources without hooks are stored and deleted plainly."""
    deleted = await ctx.resources.delete("Patient", sample_patient.resource_id)

    assert deleted.is_deleted
    assert await count(db_session, SubscriptionIndexEntry) == 0


@pytest.mark.asyncio
async def test_hook_refuses_index_drop_without_deletion(
    ctx: SubscriptionContext, sample_subscription: Resource
):
    """Test the delete hook path checks the resource is really deleted."""
    hook = ctx.resources.handlers.get("Subscription").hooks[0]

    with pytest.raises(IndexInconsistencyError):
        await hook.after_write(sample_subscription, {}, utcnow())

    assert await ctx.index.count_entries(sample_subscription.resource_id) == 1


@pytest.mark.asyncio
async def test_hook_order(ctx: SubscriptionContext, subscription_factory):
    """Test hooks run validation first, then create, then write."""
    calls = []

    class RecordingHook:
        async def before_write(self, content):
            calls.append("before_write")

        async def after_create(self, entity, content):
            calls.append("after_create")

        async def after_write(self, entity, content, deleted_at):
            calls.append(("after_write", deleted_at is not None))

    ctx.resources.handlers.add_hooks("Subscription", RecordingHook())

    resource = await ctx.resources.create("Subscription", subscription_factory())
    await ctx.resources.update("Subscription", resource.resource_id, subscription_factory())
    await ctx.resources.delete("Subscription", resource.resource_id)

    assert calls == [
        "before_write",
        "after_create",
        ("after_write", False),
        "before_write",
        ("after_write", False),
        ("after_write", True),
    ]
