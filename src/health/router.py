"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse

from src.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])

ENGINES = ("progress_engine", "session_engine")


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - the process is up."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> ORJSONResponse:
    """Readiness probe - both rules engines are attached to the app."""
    settings = get_settings()
    engines = {
        name: getattr(request.app.state, name, None) is not None for name in ENGINES
    }
    ready = all(engines.values())
    return ORJSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "environment": settings.environment,
            "engines": engines,
        },
    )


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
