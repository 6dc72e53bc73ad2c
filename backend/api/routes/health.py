"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.config import Settings, get_settings
from shared.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    storage_backend: str
    storage: str


def check_storage(settings: Settings) -> str:
    """Check the configured storage backend."""
    if settings.storage_backend == "memory":
        return "in-memory"

    from shared.database import get_supabase_client
    from shared.repository import BaseRepository

    checker = BaseRepository(get_supabase_client())
    with checker._storage_call("readiness_check"):
        checker._db.table("users").select("id").limit(1).execute()
    return "connected"


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(settings: Settings = Depends(get_settings)):
    """
    Readiness check endpoint.

    Returns 503 when the storage backend can't be reached.
    """
    try:
        storage = check_storage(settings)
    except (StorageUnavailableError, RuntimeError) as e:
        logger.warning(f"Readiness check failed: {e}")
        body = ReadinessResponse(
            status="unavailable",
            storage_backend=settings.storage_backend,
            storage="unreachable",
        )
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())

    return ReadinessResponse(
        status="ready",
        storage_backend=settings.storage_backend,
        storage=storage,
    )
