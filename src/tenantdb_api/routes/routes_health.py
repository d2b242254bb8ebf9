"""Health check endpoints for monitoring application status."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from tenantdb_api.workflow import __version__

ROUTER_HEALTH = APIRouter(tags=["Health"])

SERVICE_NAME = "Tenant Database Provisioning API"


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
                        "version": "1.0.0",
                        "workflow_enabled": True,
                        "scheduler_enabled": False,
                    }
                }
            },
        }
    },
)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Lightweight: does not touch the control database or the SQL Server.
    """
    settings = request.app.state.settings

    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": __version__,
        "workflow_enabled": getattr(request.app.state, "orchestrator", None) is not None,
        "scheduler_enabled": settings.enable_scheduler,
    }

    logger.debug("Health check requested", status="healthy")

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response_data,
    )


@ROUTER_HEALTH.get(
    "/health/ready",
    summary="Readiness check",
    description="Checks the control database connection. Returns 503 when it is unavailable or not configured.",
)
async def readiness_check(request: Request):
    pool = getattr(request.app.state, "control_db_pool", None)
    orchestrator = getattr(request.app.state, "orchestrator", None)

    if pool is None:
        healthy = False
        database = "not_configured"
    else:
        healthy = await pool.health_check()
        database = "healthy" if healthy else "unhealthy"

    response_data = {
        "status": "ready" if healthy else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "control_database": database,
        "run_in_progress": bool(orchestrator and orchestrator.is_running),
    }

    if not healthy:
        logger.warning("Readiness check failed", control_database=database)

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response_data,
    )
