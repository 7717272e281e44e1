import logging
import uuid
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from aiocache import SimpleMemoryCache

logger = logging.getLogger(__name__)

def series_cache_key(kind: str, *parts: Any) -> str:
    """Build a cache key such as ``pressure:41.5236:-70.6711:2024-06-01``.

    Coordinates are rendered exactly, so only identical positions share an entry.
    """
    rendered = []
    for part in parts:
        if isinstance(part, date):
            rendered.append(part.isoformat())
        elif isinstance(part, float):
            rendered.append(repr(part))
        else:
            rendered.append(str(part))
    return ":".join([kind, *rendered])

class SeriesCache:
    """Memoizes upstream fetch results for the lifetime of one backfill run.

    Every instance gets its own namespace, so two runs never see each other's
    entries. Whatever a fetch settled to is stored, failures included. Two
    concurrent misses on the same key may both fetch; the last write wins.
    """

    def __init__(self, namespace: Optional[str] = None):
        self.namespace = namespace or f"backfill:{uuid.uuid4().hex}:"
        self._cache = SimpleMemoryCache(namespace=self.namespace)
        self.hits = 0
        self.misses = 0

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        cached_value = await self._cache.get(key)
        if cached_value is not None:
            self.hits += 1
            return cached_value

        self.misses += 1
        value = await fetch()
        await self._cache.set(key, value)
        return value

    async def close(self) -> None:
        """Drop every entry written by this run."""
        await self._cache.clear(namespace=self.namespace)
        logger.debug(f"Series cache {self.namespace} cleared ({self.hits} hits, {self.misses} misses)")
