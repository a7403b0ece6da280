"""API v2 router initialization."""

from fastapi import APIRouter

from app.api.v2.subscriptions import router as subscriptions_router

router = APIRouter()

router.include_router(subscriptions_router, prefix="/subscriptions", tags=["Subscriptions"])
