"""HTTP routers: liveness plus the versioned subscription API."""

from fastapi import APIRouter

from app.api.v2 import router as v2_router

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "ok"}


router.include_router(v2_router, prefix="/api/v2")
