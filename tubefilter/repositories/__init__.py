"""Repository implementations package."""
from .memory import InMemoryRepository

__all__ = ["InMemoryRepository"]
