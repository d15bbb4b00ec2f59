"""Health check router."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.database import check_db, utcnow
from ..core.observability import SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> JSONResponse:
    """
    Liveness check.

    Returns current service status and timestamp.
    """
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=utcnow(),
        version=SERVICE_VERSION
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.get("/api/health")
async def api_health_check() -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content={"success": True, "status": HealthStatus.HEALTHY.value, "message": "API is running"}
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> JSONResponse:
    """Readiness check; reports not ready while the database is unreachable."""
    try:
        database_ok = await check_db()
    except Exception as e:
        logger.warning("Readiness check failed", extra={"error": str(e)})
        database_ok = False

    response_data = ReadinessResponse(
        status=HealthStatus.READY if database_ok else HealthStatus.NOT_READY,
        database=database_ok,
        timestamp=utcnow()
    )
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content=response_data.model_dump(mode="json")
    )
