"""
Dependency injection wiring.
The repository, catalog gateway and settings are built once in create_app
and stored on app.state; request-scoped services are assembled from them.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, Query, Request

from tubefilter.config import Settings
from tubefilter.core.exceptions import AuthError
from tubefilter.models.interfaces import Repository
from tubefilter.models.schemas import ContentFilter, Identity
from tubefilter.services.catalog import CatalogGateway
from tubefilter.services.recommendations import RecommendationEngine
from tubefilter.services.tracker import InteractionTracker
from tubefilter.services.videos import VideoService

logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifetime
# =============================================================================


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_catalog(request: Request) -> CatalogGateway:
    return request.app.state.catalog


# =============================================================================
# Request-Scoped Services
# =============================================================================


def get_video_service(
    repository: Repository = Depends(get_repository),
    catalog: CatalogGateway = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> VideoService:
    return VideoService(repository, catalog, settings)


def get_recommendation_engine(
    repository: Repository = Depends(get_repository),
    catalog: CatalogGateway = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> RecommendationEngine:
    return RecommendationEngine(repository, catalog, settings)


def get_tracker(repository: Repository = Depends(get_repository)) -> InteractionTracker:
    return InteractionTracker(repository)


# =============================================================================
# Identity
# =============================================================================


async def get_identity(
    x_user_id: Optional[str] = Header(
        default=None,
        alias="X-User-Id",
        description="Authenticated user id, set by the session layer",
    ),
    repository: Repository = Depends(get_repository),
) -> Optional[Identity]:
    """
    Resolve the caller's identity.
    Missing, malformed or unknown ids resolve to anonymous (None).
    """
    if not x_user_id:
        return None
    try:
        user_id = int(x_user_id)
    except ValueError:
        logger.debug(f"Ignoring malformed user id header: {x_user_id!r}")
        return None

    user = await repository.get_user(user_id)
    if user is None:
        return None
    return Identity(user_id=user.id, username=user.username)


def require_identity(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    """Identity for endpoints that reject anonymous callers."""
    if identity is None:
        raise AuthError()
    return identity


# =============================================================================
# Content Filter
# =============================================================================


async def get_content_filter(
    exclude_shorts: Optional[bool] = Query(default=None, alias="excludeShorts"),
    exclude_vertical: Optional[bool] = Query(default=None, alias="excludeVertical"),
    min_duration: Optional[int] = Query(default=None, alias="minDuration", ge=0),
    repository: Repository = Depends(get_repository),
) -> ContentFilter:
    """Stored preferences, overridden per request by query parameters."""
    preferences = await repository.get_preferences()
    overrides = {
        "exclude_shorts": exclude_shorts,
        "exclude_vertical": exclude_vertical,
        "min_duration": min_duration,
    }
    values = preferences.model_dump(exclude={"id"})
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ContentFilter(**values)
