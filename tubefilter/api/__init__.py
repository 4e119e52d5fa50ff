"""API package - FastAPI routes and dependencies."""
from .dependencies import get_repository, get_identity, require_identity
from .routers import (
    health_router,
    history_router,
    preferences_router,
    recommendations_router,
    videos_router,
)

__all__ = [
    "get_identity",
    "get_repository",
    "health_router",
    "history_router",
    "preferences_router",
    "recommendations_router",
    "require_identity",
    "videos_router",
]
