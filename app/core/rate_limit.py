"""Rate limiting for chatty admin endpoints.

The linked-product search is called on every keystroke by the promotion
wizard, so it gets a per-admin sliding window.
"""

import time
import uuid as uuid_pkg
from collections import defaultdict
from dataclasses import dataclass
from typing import TypeAlias

from fastapi import HTTPException, status

from app.config import settings


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests: int  # Maximum requests allowed
    window_seconds: int  # Time window in seconds


PRODUCT_SEARCH_LIMIT = RateLimitConfig(
    requests=settings.product_search_requests,
    window_seconds=settings.product_search_window_seconds,
)


AdminId: TypeAlias = uuid_pkg.UUID
Timestamp: TypeAlias = float


class RateLimiter:
    """In-memory sliding-window limiter keyed by admin and endpoint.

    Single-instance only; each worker process keeps its own windows.
    """

    def __init__(self) -> None:
        self._requests: dict[AdminId, dict[str, list[Timestamp]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def check_rate_limit(
        self,
        admin_id: AdminId,
        endpoint_key: str,
        config: RateLimitConfig,
    ) -> None:
        """Record a request, or raise 429 if the window is already full."""
        now = time.time()
        cutoff = now - config.window_seconds

        recent = [ts for ts in self._requests[admin_id][endpoint_key] if ts > cutoff]

        if len(recent) >= config.requests:
            retry_after = int(min(recent) + config.window_seconds - now) + 1
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Try again in {retry_after} seconds.",
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)
        self._requests[admin_id][endpoint_key] = recent

    def reset(self) -> None:
        self._requests.clear()


rate_limiter = RateLimiter()
