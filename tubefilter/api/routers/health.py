"""
Health check router for observability.
"""
from fastapi import APIRouter, Depends

from tubefilter.api.dependencies import get_app_settings, get_repository
from tubefilter.config import Settings
from tubefilter.models.interfaces import Repository

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(
    settings: Settings = Depends(get_app_settings),
    repository: Repository = Depends(get_repository),
) -> dict:
    """
    Readiness check for Kubernetes.
    Reports catalog configuration and repository sizes.
    """
    counts = repository.counts() if hasattr(repository, "counts") else {}
    return {
        "status": "ready",
        "catalog": {
            "base_url": settings.CATALOG_API_BASE_URL,
            "api_key_configured": bool(settings.CATALOG_API_KEY),
            "timeout_sec": settings.CATALOG_TIMEOUT_SEC,
        },
        "repository": counts,
    }
