"""Best-effort in-memory result caches."""

from .ttl_cache import CacheEntry, CacheSweeper, ResultCache

__all__ = ["CacheEntry", "CacheSweeper", "ResultCache"]
