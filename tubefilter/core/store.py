"""
Generic in-memory keyed store.
Thread-safe, one lock per collection, suitable as the backing map of
the in-memory repository. Can be replaced with a database table.
"""
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Dict, Generic, Hashable, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class StoreInterface(ABC, Generic[K, T]):
    """Abstract interface for keyed store implementations."""

    @abstractmethod
    def get(self, key: K) -> Optional[T]:
        """Get value by key, returns None if not found."""
        pass

    @abstractmethod
    def upsert(self, key: K, value: T) -> T:
        """Insert or overwrite value by key."""
        pass

    @abstractmethod
    def merge(
        self,
        key: K,
        create: Callable[[], T],
        update: Callable[[T], T],
    ) -> T:
        """Atomically create a value if absent, else replace it with update(current)."""
        pass

    @abstractmethod
    def delete(self, key: K) -> bool:
        """Delete key, returns True if existed."""
        pass

    @abstractmethod
    def values(self) -> List[T]:
        """Snapshot of all stored values in insertion order."""
        pass


class InMemoryStore(StoreInterface[K, T]):
    """
    Thread-safe in-memory keyed store.

    Usage:
        store: StoreInterface[str, Video] = InMemoryStore()
        store.upsert(video.id, video)
        liked = store.merge(key, create=new_record, update=touch)
    """

    def __init__(self) -> None:
        self._store: Dict[K, T] = {}
        self._lock = Lock()

    def get(self, key: K) -> Optional[T]:
        with self._lock:
            return self._store.get(key)

    def upsert(self, key: K, value: T) -> T:
        with self._lock:
            self._store[key] = value
        return value

    def merge(
        self,
        key: K,
        create: Callable[[], T],
        update: Callable[[T], T],
    ) -> T:
        with self._lock:
            current = self._store.get(key)
            value = create() if current is None else update(current)
            self._store[key] = value
            return value

    def delete(self, key: K) -> bool:
        with self._lock:
            if key in self._store:
                del self._store[key]
                return True
            return False

    def values(self) -> List[T]:
        with self._lock:
            return list(self._store.values())

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        """Return values matching predicate, evaluated under the lock."""
        with self._lock:
            return [v for v in self._store.values() if predicate(v)]

    def size(self) -> int:
        """Return number of entries."""
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._store.clear()
