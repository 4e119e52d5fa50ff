"""Core infrastructure components."""
from .exceptions import (
    AppException,
    AuthError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from .store import InMemoryStore, StoreInterface

__all__ = [
    "AppException",
    "AuthError",
    "InMemoryStore",
    "NotFoundError",
    "StoreInterface",
    "UpstreamError",
    "ValidationError",
]
