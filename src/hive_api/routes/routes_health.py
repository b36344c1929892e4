"""Health check endpoints for monitoring application status."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

ROUTER_HEALTH = APIRouter(tags=["Health"])

SERVICE_NAME = "Hive API"


@ROUTER_HEALTH.get(
    "/health",
    summary="Health check endpoint",
    description="Basic health check that returns application status and metadata",
    responses={
        status.HTTP_200_OK: {
            "description": "Application is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "timestamp": "2026-01-05T12:00:00.000000Z",
                        "service": SERVICE_NAME,
                        "version": "v1",
                    }
                }
            },
        }
    },
)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Lightweight liveness probe; does not touch the hive store.
    """
    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": request.app.version,
    }

    logger.debug("Health check requested", status="healthy")

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response_data,
    )


@ROUTER_HEALTH.get(
    "/health/ready",
    summary="Readiness check endpoint",
    description="Checks that the hive store database is reachable",
    responses={
        status.HTTP_200_OK: {"description": "Hive store reachable"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Hive store not configured or unreachable"},
    },
)
async def readiness_check(request: Request):
    """Readiness probe: runs SELECT 1 against the hive store pool."""
    db_pool = request.app.state.db_pool
    timestamp = datetime.now(timezone.utc).isoformat()

    if db_pool is None:
        logger.warning("Readiness check failed", reason="database not configured")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "not_configured", "timestamp": timestamp},
        )

    healthy = await db_pool.health_check()
    if not healthy:
        logger.warning("Readiness check failed", reason="database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable", "timestamp": timestamp},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "ready", "database": "ok", "timestamp": timestamp},
    )
