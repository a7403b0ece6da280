"""
Subscription Registry - FastAPI Application

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.api import router as api_router
from app.core.config import get_settings
from app.core.exceptions import (
    IndexInconsistencyError,
    ResourceGoneError,
    ResourceNotFoundError,
    ValidationError,
)
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.db.session import engine

settings = get_settings()


async def init_database() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Subscription Registry...")

    # Ensure data directory exists
    if not settings.database_url_override:
        Path(settings.data_save_folder).mkdir(parents=True, exist_ok=True)

    await init_database()

    logger.info(f"Subscription Registry started on port {settings.port}")

    yield

    # Shutdown
    logger.info("Shutting down Subscription Registry...")
    await engine.dispose()
    logger.info("Subscription Registry stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Subscription Registry - validation and index management for subscription resources",
    lifespan=lifespan,
    docs_url="/swagger" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"Code": status_code, "Message": message},
    )


# Exception handlers
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Rejected writes are unprocessable entities."""
    return _error(422, exc.reason)


@app.exception_handler(ResourceNotFoundError)
async def not_found_exception_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Missing or deleted resources."""
    if isinstance(exc, ResourceGoneError):
        return _error(410, str(exc))
    return _error(404, str(exc))


@app.exception_handler(IndexInconsistencyError)
async def index_exception_handler(
    request: Request, exc: IndexInconsistencyError
) -> JSONResponse:
    """Index state did not match the resource write; the write was rolled back."""
    logger.error(f"Subscription index inconsistency: {exc}")
    return _error(500, str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return _error(500, str(exc))


# Include API router
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers,
    )
