"""Interface for the response cache store.

The store only keeps entries; deciding whether an entry is fresh is the
caller's job, so stale entries must remain readable.
"""

import abc
from typing import Optional

from ..models.common import CacheKey
from ..models.service import CacheEntry


class CacheStore(abc.ABC):
    """Abstract Base Class for key-value storage of cache entries."""

    @abc.abstractmethod
    async def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Retrieves the entry stored under ``key`` regardless of its age.

        Returns:
            The stored CacheEntry, or None if the key was never written.
        """
        pass

    @abc.abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Stores ``entry`` under ``entry.key``; the last writer wins."""
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Removes every stored entry."""
        pass
