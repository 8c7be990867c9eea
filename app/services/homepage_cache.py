"""
TTL cache for the public homepage feed.

The storefront polls the homepage feed on every page view, so responses
are kept for a short TTL. Any homepage-content-changed event drops the
cache at once, so admins see their changes without waiting for expiry.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

from app.config.settings import settings
from app.core.events import ContentEvent, ContentEventBus, ContentSignal

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HomepageFeedCache:
    def __init__(self, ttl_seconds: int | None = None, maxsize: int = 8):
        self._cache: TTLCache[str, Any] = TTLCache(
            maxsize=maxsize,
            ttl=ttl_seconds if ttl_seconds is not None else settings.homepage_cache_ttl_seconds,
        )

    def __len__(self) -> int:
        return len(self._cache)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for key, or load and store it. Loader errors are not cached."""
        if key in self._cache:
            logger.debug(f"Cache HIT: homepage {key}")
            cached: T = self._cache[key]
            return cached

        logger.debug(f"Cache MISS: homepage {key}")
        value = await loader()
        self._cache[key] = value
        return value

    def invalidate(self, event: ContentEvent | None = None) -> None:
        if self._cache:
            reason = f" after {event.signal.value}" if event else ""
            logger.info(f"Dropping {len(self._cache)} cached homepage feed(s){reason}")
        self._cache.clear()

    def attach(self, events: ContentEventBus) -> None:
        events.subscribe(ContentSignal.HOMEPAGE_CONTENT_CHANGED, self.invalidate)


homepage_cache = HomepageFeedCache()
