"""
Preferences and user registration router.
"""
from fastapi import APIRouter, Depends, status

from tubefilter.api.dependencies import get_repository
from tubefilter.models.interfaces import Repository
from tubefilter.models.schemas import ContentFilter, User, UserCreate, UserPreference

router = APIRouter(tags=["preferences"])


@router.get("/preferences", response_model=UserPreference, summary="Get Filter Preferences")
async def get_preferences(
    repository: Repository = Depends(get_repository),
) -> UserPreference:
    return await repository.get_preferences()


@router.post(
    "/preferences",
    response_model=UserPreference,
    summary="Update Filter Preferences",
    responses={400: {"description": "Body does not match the filter shape"}},
)
async def update_preferences(
    preferences: ContentFilter,
    repository: Repository = Depends(get_repository),
) -> UserPreference:
    """Omitted fields take their defaults; unknown fields are rejected."""
    return await repository.save_preferences(preferences)


@router.post(
    "/users",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    summary="Register User",
    responses={400: {"description": "Username already exists"}},
)
async def create_user(
    payload: UserCreate,
    repository: Repository = Depends(get_repository),
) -> User:
    return await repository.create_user(payload.username)
