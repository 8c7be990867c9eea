"""
Dashboard view model over promotions and announcements.

Rows from the store are copied into frozen ContentItem snapshots with
their derived status and edit permission, so nothing here ever mutates an
ORM object. Toggle and delete apply the change to a new list first, call
the store, and put the previous list back if the store says no.
"""

import logging
import uuid as uuid_pkg
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.events import ContentEvent, ContentEventBus, ContentSignal
from app.domain.announcement_operations import AnnouncementOperations, announcement_ops
from app.domain.content_permissions import can_edit
from app.domain.promotion_operations import PromotionOperations, promotion_ops
from app.models.admin import Admin
from app.models.announcement import Announcement, AnnouncementType
from app.models.content_kind import ContentKind
from app.models.promotion import Promotion
from app.services.dashboard.status import (
    DerivedStatus,
    StatusFilter,
    derive_status,
    discount_label,
    matches_search,
)
from app.services.notices import Notice

logger = logging.getLogger(__name__)

EditGuard = Callable[[AsyncSession, ContentKind, uuid_pkg.UUID, Admin | None], Awaitable[bool]]


@dataclass(frozen=True)
class ContentItem:
    kind: ContentKind
    id: uuid_pkg.UUID
    title: str
    body: str | None  # promotion description or announcement message
    code: str | None
    icon: str | None
    start_date: datetime
    end_date: datetime
    is_active: bool
    show_on_homepage: bool
    priority: int
    status: DerivedStatus
    can_edit: bool
    discount: str | None = None
    usage_count: int | None = None
    usage_limit: int | None = None

    @property
    def label(self) -> str:
        return self.kind.family.capitalize()

    def matches_search(self, query: str) -> bool:
        return matches_search(query, self.title, self.body, self.code)

    def with_active(self, is_active: bool, now: datetime) -> "ContentItem":
        return replace(
            self,
            is_active=is_active,
            status=derive_status(self.start_date, self.end_date, is_active, now),
        )


class ContentDashboard:
    def __init__(
        self,
        db: AsyncSession,
        actor: Admin | None,
        events: ContentEventBus,
        promotions: PromotionOperations | None = None,
        announcements: AnnouncementOperations | None = None,
        guard: EditGuard = can_edit,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.actor = actor
        self.events = events
        self.promotions = promotions or promotion_ops
        self.announcements = announcements or announcement_ops
        self.guard = guard
        self.clock = clock or (lambda: datetime.now(UTC))
        self.items: list[ContentItem] = []
        self.notices: list[Notice] = []

    # ─────────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────────

    async def load(self) -> None:
        """Reload both families. A family that fails to load shows as empty plus a notice."""
        now = self.clock()
        items: list[ContentItem] = []

        promotions = await self.promotions.list_all(self.db)
        if promotions.ok:
            for promotion in promotions.value or []:
                items.append(await self._promotion_item(promotion, now))
        else:
            self._notify(Notice.error(f"Failed to load promotions: {promotions.error.message}"))  # type: ignore[union-attr]

        announcements = await self.announcements.list_all(self.db)
        if announcements.ok:
            for announcement in announcements.value or []:
                items.append(await self._announcement_item(announcement, now))
        else:
            self._notify(
                Notice.error(f"Failed to load announcements: {announcements.error.message}")  # type: ignore[union-attr]
            )

        self.items = items

    async def _promotion_item(self, promotion: Promotion, now: datetime) -> ContentItem:
        kind = ContentKind.PROMOTION
        return ContentItem(
            kind=kind,
            id=promotion.id,
            title=promotion.title,
            body=promotion.description,
            code=promotion.code,
            icon=None,
            start_date=promotion.start_date,
            end_date=promotion.end_date,
            is_active=promotion.is_active,
            show_on_homepage=promotion.show_on_homepage,
            priority=promotion.priority,
            status=derive_status(promotion.start_date, promotion.end_date, promotion.is_active, now),
            can_edit=await self.guard(self.db, kind, promotion.id, self.actor),
            discount=discount_label(promotion.discount_type, promotion.discount_value),
            usage_count=promotion.usage_count,
            usage_limit=promotion.usage_limit,
        )

    async def _announcement_item(self, announcement: Announcement, now: datetime) -> ContentItem:
        kind = ContentKind(AnnouncementType(announcement.announcement_type).value)
        return ContentItem(
            kind=kind,
            id=announcement.id,
            title=announcement.title,
            body=announcement.message,
            code=None,
            icon=announcement.icon,
            start_date=announcement.start_date,
            end_date=announcement.end_date,
            is_active=announcement.is_active,
            show_on_homepage=announcement.show_on_homepage,
            priority=announcement.priority,
            status=derive_status(
                announcement.start_date, announcement.end_date, announcement.is_active, now
            ),
            can_edit=await self.guard(self.db, kind, announcement.id, self.actor),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def filtered(
        self,
        search: str = "",
        status: StatusFilter | str = StatusFilter.ALL,
    ) -> list[ContentItem]:
        status_filter = StatusFilter(status)
        return [
            item
            for item in self.items
            if item.matches_search(search) and item.status.matches(status_filter)
        ]

    def counts(self) -> dict[str, int]:
        counts = {
            bucket.value: sum(1 for item in self.items if item.status.matches(bucket))
            for bucket in StatusFilter
        }
        counts["promotions"] = sum(1 for item in self.items if not item.kind.is_announcement)
        counts["announcements"] = sum(1 for item in self.items if item.kind.is_announcement)
        return counts

    def take_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # ─────────────────────────────────────────────────────────────────────────
    # Actions
    # ─────────────────────────────────────────────────────────────────────────

    async def toggle_active(self, kind: ContentKind | str, entity_id: uuid_pkg.UUID) -> Notice:
        found = self._editable(kind, entity_id)
        if isinstance(found, Notice):
            return self._notify(found)
        index, item = found

        new_value = not item.is_active
        snapshot = self.items
        self.items = [*snapshot[:index], item.with_active(new_value, self.clock()), *snapshot[index + 1 :]]

        result = await self._ops(item.kind).toggle_active(self.db, item.id, new_value, self.actor)
        if not result.ok:
            self.items = snapshot
            return self._notify(Notice.error(result.error.message))  # type: ignore[union-attr]

        await self.events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind=item.kind.value, entity_id=item.id)
        verb = "activated" if new_value else "deactivated"
        return self._notify(Notice.success(f"{item.label} {verb}"))

    async def delete(self, kind: ContentKind | str, entity_id: uuid_pkg.UUID) -> Notice:
        found = self._editable(kind, entity_id)
        if isinstance(found, Notice):
            return self._notify(found)
        index, item = found

        snapshot = self.items
        self.items = [*snapshot[:index], *snapshot[index + 1 :]]

        result = await self._ops(item.kind).delete(self.db, item.id, self.actor)
        if not result.ok and not result.error.is_benign:  # type: ignore[union-attr]
            self.items = snapshot
            return self._notify(Notice.error(result.error.message))  # type: ignore[union-attr]

        await self.events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind=item.kind.value, entity_id=item.id)
        return self._notify(Notice.success(f"{item.label} deleted"))

    # ─────────────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────────────

    def attach(self) -> None:
        """Reload whenever content-list-changed is published."""
        self.events.subscribe(ContentSignal.CONTENT_LIST_CHANGED, self._on_list_changed)

    def detach(self) -> None:
        self.events.unsubscribe(ContentSignal.CONTENT_LIST_CHANGED, self._on_list_changed)

    async def _on_list_changed(self, event: ContentEvent) -> None:
        logger.debug(f"Reloading dashboard after {event.signal.value}")
        await self.load()

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _ops(self, kind: ContentKind) -> Any:
        return self.announcements if kind.is_announcement else self.promotions

    def _editable(
        self,
        kind: ContentKind | str,
        entity_id: uuid_pkg.UUID,
    ) -> tuple[int, ContentItem] | Notice:
        family = ContentKind(kind).family
        for index, item in enumerate(self.items):
            if item.id == entity_id and item.kind.family == family:
                if not item.can_edit:
                    return Notice.error(f"You do not have permission to change this {family}")
                return index, item
        return Notice.error(f"{family.capitalize()} not found")

    def _notify(self, notice: Notice) -> Notice:
        self.notices.append(notice)
        return notice
