"""Combined content endpoints: the admin dashboard and the public storefront feeds."""

import uuid as uuid_pkg

from fastapi import APIRouter, Depends, Query

from app.api.deps import CurrentAdmin, DbSession, RlsSession
from app.api.v1.announcements import serialize_announcement
from app.api.v1.promotions import serialize_promotion
from app.core.events import ContentEventBus, get_event_bus
from app.core.exceptions import raise_for_store_error
from app.domain import announcement_ops, promotion_ops
from app.models.content_kind import ContentKind
from app.services.dashboard import ContentDashboard, ContentItem, StatusFilter
from app.services.homepage_cache import homepage_cache
from app.services.notices import Notice

router = APIRouter(prefix="/content", tags=["content"])


# ─────────────────────────────────────────────────────────────────────────────
# Serialization
# ─────────────────────────────────────────────────────────────────────────────


def _serialize_item(item: ContentItem) -> dict:
    return {
        "kind": item.kind.value,
        "id": str(item.id),
        "title": item.title,
        "body": item.body,
        "code": item.code,
        "icon": item.icon,
        "discount": item.discount,
        "usage_count": item.usage_count,
        "usage_limit": item.usage_limit,
        "start_date": item.start_date.isoformat(),
        "end_date": item.end_date.isoformat(),
        "is_active": item.is_active,
        "show_on_homepage": item.show_on_homepage,
        "priority": item.priority,
        "status": item.status.badge.value,
        "expired": item.status.expired,
        "upcoming": item.status.upcoming,
        "can_edit": item.can_edit,
    }


def _serialize_notice(notice: Notice) -> dict:
    return {"level": notice.level.value, "message": notice.message}


def _serialize_dashboard(
    dashboard: ContentDashboard,
    search: str,
    status_filter: StatusFilter,
    notice: Notice | None = None,
) -> dict:
    return {
        "items": [_serialize_item(i) for i in dashboard.filtered(search, status_filter)],
        "counts": dashboard.counts(),
        "notices": [_serialize_notice(n) for n in dashboard.take_notices()],
        "notice": _serialize_notice(notice) if notice else None,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Dashboard
# ─────────────────────────────────────────────────────────────────────────────


@router.get("/dashboard")
async def get_dashboard(
    current_admin: CurrentAdmin,
    db: RlsSession,
    search: str = Query("", description="Matches title, description or message, and code"),
    status: StatusFilter = Query(StatusFilter.ALL),
    events: ContentEventBus = Depends(get_event_bus),
):
    """All promotions and announcements with status badges, counts and edit rights."""
    dashboard = ContentDashboard(db, current_admin, events)
    await dashboard.load()
    return _serialize_dashboard(dashboard, search, status)


@router.post("/dashboard/{kind}/{entity_id}/toggle")
async def toggle_from_dashboard(
    kind: ContentKind,
    entity_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    db: RlsSession,
    search: str = Query(""),
    status: StatusFilter = Query(StatusFilter.ALL),
    events: ContentEventBus = Depends(get_event_bus),
):
    """Flip is_active. A failure comes back as an error notice with the list unchanged."""
    dashboard = ContentDashboard(db, current_admin, events)
    await dashboard.load()
    notice = await dashboard.toggle_active(kind, entity_id)
    return _serialize_dashboard(dashboard, search, status, notice)


@router.delete("/dashboard/{kind}/{entity_id}")
async def delete_from_dashboard(
    kind: ContentKind,
    entity_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    db: RlsSession,
    search: str = Query(""),
    status: StatusFilter = Query(StatusFilter.ALL),
    events: ContentEventBus = Depends(get_event_bus),
):
    dashboard = ContentDashboard(db, current_admin, events)
    await dashboard.load()
    notice = await dashboard.delete(kind, entity_id)
    return _serialize_dashboard(dashboard, search, status, notice)


# ─────────────────────────────────────────────────────────────────────────────
# Public feeds (no authentication)
# ─────────────────────────────────────────────────────────────────────────────


@router.get("/active")
async def get_active_content(db: DbSession):
    """Everything currently live on the storefront."""
    promotions = await promotion_ops.list_active(db)
    if not promotions.ok:
        raise_for_store_error(promotions.error, "Promotion")
    announcements = await announcement_ops.list_active(db)
    if not announcements.ok:
        raise_for_store_error(announcements.error, "Announcement")

    return {
        "promotions": [serialize_promotion(p) for p in promotions.value],
        "announcements": [serialize_announcement(a) for a in announcements.value],
    }


@router.get("/homepage")
async def get_homepage_content(db: DbSession):
    """Up to five live promotions and five live announcements flagged for the homepage."""

    async def load() -> dict:
        promotions = await promotion_ops.list_homepage(db)
        if not promotions.ok:
            raise_for_store_error(promotions.error, "Promotion")
        announcements = await announcement_ops.list_homepage(db)
        if not announcements.ok:
            raise_for_store_error(announcements.error, "Announcement")
        return {
            "promotions": [serialize_promotion(p) for p in promotions.value],
            "announcements": [serialize_announcement(a) for a in announcements.value],
        }

    return await homepage_cache.get_or_load("homepage", load)
