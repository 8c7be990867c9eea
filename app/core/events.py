"""In-process content event bus.

Two signals tie the dashboard together:

- content-list-changed: a promotion or announcement was created, edited,
  toggled or deleted; list views should reload.
- homepage-content-changed: something shown on the public homepage changed;
  cached homepage feeds should be dropped.

Delivery is in-process and at-most-once. Handlers run inline, in
subscription order; a failing handler is logged and does not stop the rest.
"""

import inspect
import logging
import uuid as uuid_pkg
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class ContentSignal(str, Enum):
    CONTENT_LIST_CHANGED = "content-list-changed"
    HOMEPAGE_CONTENT_CHANGED = "homepage-content-changed"


@dataclass(frozen=True)
class ContentEvent:
    signal: ContentSignal
    kind: str | None = None  # "promotion" or an announcement type
    entity_id: uuid_pkg.UUID | None = None


ContentHandler = Callable[[ContentEvent], Awaitable[None] | None]


class ContentEventBus:
    """Typed publish/subscribe for the two content signals."""

    def __init__(self) -> None:
        self._handlers: dict[ContentSignal, list[ContentHandler]] = defaultdict(list)

    def subscribe(self, signal: ContentSignal, handler: ContentHandler) -> None:
        self._handlers[signal].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {signal.value}")

    def unsubscribe(self, signal: ContentSignal, handler: ContentHandler) -> None:
        if handler in self._handlers[signal]:
            self._handlers[signal].remove(handler)

    def subscriber_count(self, signal: ContentSignal) -> int:
        return len(self._handlers[signal])

    async def publish(self, event: ContentEvent) -> None:
        """Deliver an event to every current subscriber of its signal."""
        # Copy so handlers may unsubscribe while being notified
        handlers = list(self._handlers[event.signal])
        logger.debug(f"Publishing {event.signal.value} to {len(handlers)} handler(s)")

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Content event handler failed for {event.signal.value}")

    async def emit(
        self,
        signal: ContentSignal,
        kind: str | None = None,
        entity_id: uuid_pkg.UUID | None = None,
    ) -> None:
        await self.publish(ContentEvent(signal=signal, kind=kind, entity_id=entity_id))


# Application-wide bus. Tests build their own instances.
content_events = ContentEventBus()


def get_event_bus() -> ContentEventBus:
    """FastAPI dependency returning the application bus."""
    return content_events
