"""Concrete implementation of the two-level cache store.

Keeps L1 (in-memory, bounded) in front of an optional L2 (disk-backed via
diskcache) so cached provider responses survive restarts. The store never
expires entries on its own: the request core decides freshness and may
still serve stale entries as a fallback.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import diskcache as dc

# Domain Layer Imports
from intentcli.domain.interfaces.cache import CacheStore
from intentcli.domain.models.common import CacheKey
from intentcli.domain.models.service import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_L1_MAX_ITEMS = 256
DEFAULT_L2_CACHE_DIR = Path.home() / ".intentcli" / "api_cache"


class CachingServiceImpl(CacheStore):
    """Multi-level cache store (L1 Memory, L2 diskcache)."""

    def __init__(
        self,
        l1_max_items: int = DEFAULT_L1_MAX_ITEMS,
        l2_dir: Optional[Union[str, Path]] = DEFAULT_L2_CACHE_DIR,
    ):
        """Initializes the cache store.

        Args:
            l1_max_items: Maximum number of entries kept in memory.
            l2_dir: Directory for the disk cache; None disables L2.
        """
        self.l1_cache: Dict[CacheKey, CacheEntry] = {}
        self.l1_max_items = l1_max_items
        self.l2_cache: Optional[dc.Cache] = None
        if l2_dir is not None:
            try:
                self.l2_cache = dc.Cache(str(l2_dir), timeout=1)
            except Exception as e:
                logger.error(f"Failed to initialize L2 disk cache at {l2_dir}: {e}", exc_info=True)
                self.l2_cache = None

        logger.info(
            f"CachingService initialized. L1(max={l1_max_items}), "
            f"L2({self.l2_cache.directory if self.l2_cache is not None else 'disabled'})"
        )

    def _prune_l1(self) -> None:
        """Evicts the oldest inserted entries while L1 is over its limit."""
        while len(self.l1_cache) > self.l1_max_items:
            oldest_key = next(iter(self.l1_cache))
            del self.l1_cache[oldest_key]
            logger.debug(f"L1 cache evicted key: {oldest_key}")

    # --- CacheStore Interface Implementation ---

    async def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Returns the entry for ``key`` from L1, then L2 (promoting to L1)."""
        entry = self.l1_cache.get(key)
        if entry is not None:
            logger.debug(f"L1 cache hit for key: {key}")
            return entry

        if self.l2_cache is not None:
            entry = self.l2_cache.get(key)
            if isinstance(entry, CacheEntry):
                logger.debug(f"L2 cache hit for key: {key}")
                self.l1_cache[key] = entry
                self._prune_l1()
                return entry

        logger.debug(f"Cache miss for key: {key}")
        return None

    async def put(self, entry: CacheEntry) -> None:
        """Stores ``entry`` in every enabled level, replacing older values."""
        # Re-insert so overwritten keys move to the back of the eviction order
        self.l1_cache.pop(entry.key, None)
        self.l1_cache[entry.key] = entry
        self._prune_l1()
        if self.l2_cache is not None:
            self.l2_cache.set(entry.key, entry)
        logger.debug(f"Stored cache entry: key={entry.key}")

    async def clear(self) -> None:
        self.l1_cache.clear()
        if self.l2_cache is not None:
            self.l2_cache.clear()
        logger.info("Cleared API response cache.")

    def close(self) -> None:
        """Closes the L2 disk cache handle."""
        if self.l2_cache is not None:
            self.l2_cache.close()
