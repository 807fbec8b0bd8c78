"""In-memory TTL cache for analysis results.

Each entry carries its own expiry, so one cache can hold short-lived failure
results next to regular ones. There is no capacity bound; expired entries are
dropped when read, on writes, and by clear_expired() (see CacheSweeper for a
periodic sweep).

The cache is best-effort: every operation logs and swallows internal faults.
It is not locked. Concurrent misses on the same key may recompute the value,
and the last write wins.
"""

import asyncio
import contextlib
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from cachetools import TLRUCache

from content_scan.utils.async_context import AsyncContextManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Stored value plus its absolute expiry (epoch seconds by default)."""

    value: T
    expires_at: float


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    # TLRUCache drops an entry once now >= ttu; entries stay live through expires_at itself
    return math.nextafter(entry.expires_at, math.inf)


class ResultCache(Generic[T]):
    """Typed TTL cache with per-entry expiry.

    An entry is live while now <= expires_at and absent once now > expires_at.

    Usage:
        cache: ResultCache[ImageAnalysisDetail] = ResultCache("image-analysis")
        cache.set("image-analysis:https://...", detail, ttl_seconds=300)
        cache.get("image-analysis:https://...")
    """

    def __init__(self, name: str, timer: Callable[[], float] = time.time):
        self.name = name
        self._timer = timer
        self._store: TLRUCache = TLRUCache(maxsize=math.inf, ttu=_entry_expiry, timer=timer)

    def set(self, key: str, value: T, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds, overwriting any previous entry."""
        try:
            entry = CacheEntry(value=value, expires_at=self._timer() + ttl_seconds)
            self._store[key] = entry
            logger.debug(f"[{self.name}] cached {key} (TTL: {ttl_seconds}s)")
        except Exception as e:
            logger.warning(f"[{self.name}] cache set failed for {key}: {e}")

    def get(self, key: str) -> T | None:
        """Return the live value for key, or None. Expired entries are removed."""
        try:
            entry = self._store.get(key)
            if entry is None:
                # TLRUCache hides expired entries; deleting one drops it and raises KeyError
                with contextlib.suppress(KeyError):
                    del self._store[key]
                logger.debug(f"[{self.name}] cache miss: {key}")
                return None
            logger.debug(f"[{self.name}] cache hit: {key}")
            return entry.value
        except Exception as e:
            logger.warning(f"[{self.name}] cache get failed for {key}: {e}")
            return None

    def clear_expired(self) -> int:
        """Remove every expired entry. Returns how many were swept."""
        try:
            swept = len(self._store.expire())
            if swept:
                logger.debug(f"[{self.name}] swept {swept} expired entries")
            return swept
        except Exception as e:
            logger.warning(f"[{self.name}] cache cleanup failed: {e}")
            return 0

    def clear(self) -> None:
        """Remove all entries unconditionally."""
        try:
            self._store.clear()
        except Exception as e:
            logger.warning(f"[{self.name}] cache clear failed: {e}")

    def __len__(self) -> int:
        """Number of live entries (sweeps expired ones first)."""
        return len(self._store)


class CacheSweeper(AsyncContextManager):
    """Background task that calls clear_expired() on caches at a fixed interval.

    Usage:
        async with CacheSweeper([image_cache, batch_cache], interval=60):
            ...
    """

    def __init__(self, caches: Iterable[ResultCache], interval: float):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._caches = list(caches)
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start sweeping on the running event loop (no-op if already running)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="content-scan-cache-sweeper")

    def sweep(self) -> int:
        """Sweep all caches once."""
        return sum(cache.clear_expired() for cache in self._caches)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            swept = self.sweep()
            if swept:
                logger.info(f"Cache sweep removed {swept} expired entries")

    async def __aenter__(self):
        self.start()
        return self

    async def close(self) -> None:
        """Stop the sweeper task."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
