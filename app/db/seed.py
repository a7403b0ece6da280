"""Database seeder for sample data."""

import asyncio
from pathlib import Path

from loguru import logger

from app.core.config import get_settings
from app.core.deps import build_subscription_context
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.db.session import async_session_maker, engine
from app.models.subscription import SUBSCRIPTION_RESOURCE_TYPE


async def create_tables():
    """Create all tables."""
    settings = get_settings()
    if not settings.database_url_override:
        Path(settings.data_save_folder).mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created")


async def seed_patients() -> list[str]:
    """Seed patients."""
    patients = [
        {"resourceType": "Patient", "name": [{"family": "Smith", "given": ["John"]}]},
        {"resourceType": "Patient", "name": [{"family": "Jones", "given": ["Mary"]}]},
    ]

    async with async_session_maker() as db:
        ctx = build_subscription_context(db)
        ids = []
        for patient in patients:
            created = await ctx.resources.create("Patient", patient)
            ids.append(created.resource_id)
    logger.info(f"Seeded {len(ids)} patients")
    return ids


async def seed_subscriptions(patient_ids: list[str]):
    """Seed subscriptions."""
    subscriptions = [
        {
            "resourceType": "Subscription",
            "status": "active",
            "reason": "Monitor new lab results",
            "criteria": f"Observation?subject=Patient/{patient_ids[0]}&category=laboratory",
            "channel": {
                "type": "rest-hook",
                "endpoint": "http://localhost:9000/webhook/observations",
                "payload": "application/fhir+json",
            },
        },
        {
            "resourceType": "Subscription",
            "status": "requested",
            "reason": "Watch encounter changes",
            "criteria": "Encounter?status=in-progress",
            "channel": {"type": "websocket"},
        },
        {
            "resourceType": "Subscription",
            "status": "off",
            "reason": "Patient demographics",
            "criteria": "Patient?name=smith",
            "channel": {
                "type": "rest-hook",
                "endpoint": "http://localhost:9000/webhook/patients",
                "payload": "application/fhir+xml",
            },
        },
    ]

    async with async_session_maker() as db:
        ctx = build_subscription_context(db)
        for subscription in subscriptions:
            await ctx.resources.create(SUBSCRIPTION_RESOURCE_TYPE, subscription)
    logger.info(f"Seeded {len(subscriptions)} subscriptions")


async def seed_all():
    """Seed all sample data."""
    logger.info("Starting database seeding...")

    await create_tables()
    patient_ids = await seed_patients()
    await seed_subscriptions(patient_ids)

    logger.info("Database seeding completed!")


async def clear_all():
    """Clear all data from tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("All tables cleared and recreated")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "--clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())
