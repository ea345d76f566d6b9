from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from primes_api.exceptions import InvalidPositionError


@dataclass(frozen=True)
class CacheKey:
    """Validated 1-based prime position used as the cache key."""

    position: int

    def __post_init__(self) -> None:
        if self.position is None or isinstance(self.position, bool) or not isinstance(self.position, int):
            raise InvalidPositionError(self.position)
        if self.position < 1:
            raise InvalidPositionError(self.position)


class PrimeCache(ABC):
    """
    Minimal cache interface to enable swapping backends (memory, Redis, PostgreSQL) without changing callers.

    Contract:
      - get() returns the stored value or None when the key is absent.
      - put() stores or overwrites (last write wins).
      - Backend failures raise CacheStoreError; they are never reported as a miss.
    """

    @abstractmethod
    def get(self, key: CacheKey) -> Optional[int]:
        ...

    @abstractmethod
    def put(self, key: CacheKey, value: int) -> None:
        ...

    def close(self) -> None:
        """Release connections held by the backend. No-op for in-process backends."""
