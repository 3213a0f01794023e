import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_storage
from app.storage.base import Storage

logger = structlog.get_logger(__name__)

router = APIRouter()

SERVICE_NAME = "feynman-teacher"


@router.get("/health")
async def health_check(request: Request):
    """Liveness check. Returns 503 while the app is shutting down."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(
            status_code=503,
            content={"status": "shutting_down", "service": SERVICE_NAME},
        )
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness_check(storage: Storage = Depends(get_storage)):
    """Readiness check - verifies the storage backend answers."""
    storage_ok = await storage.ping()
    if not storage_ok:
        logger.error("readiness_check_failed", backend=storage.name)

    return JSONResponse(
        status_code=200 if storage_ok else 503,
        content={
            "status": "ready" if storage_ok else "degraded",
            "checks": {"storage": storage_ok},
            "backend": storage.name,
        },
    )
