"""
In-memory latest-version cache.

Entries are keyed by (platform, arch) and expire after a fixed TTL. The cache
lives on a single resolver; nothing is persisted to disk.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from browser_manager.constants import LATEST_VERSION_CACHE_TTL_SECONDS
from browser_manager.log_utils import logger

CacheKey = Tuple[str, str]


@dataclass(frozen=True)
class VersionCacheEntry:
    """A latest-version lookup and when it was made."""

    key: CacheKey
    version: str
    fetched_at: float

    def is_stale(self, now: float, ttl: float) -> bool:
        """
        Check whether the entry has outlived the TTL.

        Returns:
            True once `ttl` seconds or more have passed since `fetched_at`.
        """
        return now - self.fetched_at >= ttl


class VersionCache:
    """
    Thread-safe TTL cache for latest-version strings.

    Concurrent writers to the same key coalesce to last-writer-wins. Stale
    entries are left in place and simply ignored by get(); the next put()
    replaces them.
    """

    def __init__(
        self,
        ttl: float = LATEST_VERSION_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[CacheKey, VersionCacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[VersionCacheEntry]:
        """Return the fresh entry for `key`, or None when missing or stale."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_stale(self._clock(), self.ttl):
            logger.debug(f"Cached version for {key[0]}/{key[1]} expired")
            return None
        return entry

    def put(self, key: CacheKey, version: str) -> VersionCacheEntry:
        entry = VersionCacheEntry(key=key, version=version, fetched_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
