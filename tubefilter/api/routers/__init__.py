"""API routers package."""
from .health import router as health_router
from .history import router as history_router
from .preferences import router as preferences_router
from .recommendations import router as recommendations_router
from .videos import router as videos_router

__all__ = [
    "health_router",
    "history_router",
    "preferences_router",
    "recommendations_router",
    "videos_router",
]
