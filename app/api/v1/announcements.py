"""Announcement endpoints for seasonal, info and alert banners."""

import uuid as uuid_pkg
from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.api.deps import CurrentAdmin, RlsSession
from app.core.events import ContentEventBus, ContentSignal, get_event_bus
from app.core.exceptions import NotFoundOrForbiddenError, ValidationError, raise_for_store_error
from app.domain import StoreErrorKind, announcement_ops, can_edit
from app.models.admin import Admin
from app.models.announcement import (
    MESSAGE_LIMITS,
    Announcement,
    AnnouncementCreate,
    AnnouncementType,
    AnnouncementUpdate,
    parse_details,
)
from app.models.content_kind import ContentKind

router = APIRouter(prefix="/announcements", tags=["announcements"])


# ─────────────────────────────────────────────────────────────────────────────
# Schemas and helpers
# ─────────────────────────────────────────────────────────────────────────────


class ActiveToggle(BaseModel):
    is_active: bool


def serialize_announcement(announcement: Announcement) -> dict:
    """Serialize an announcement, with its type-specific details, to a dict response."""
    return {
        "id": str(announcement.id),
        "announcement_type": announcement.announcement_type,
        "title": announcement.title,
        "message": announcement.message,
        "icon": announcement.icon,
        "link_url": announcement.link_url,
        "link_text": announcement.link_text,
        "dismissible": announcement.dismissible,
        "details": announcement.typed_details().model_dump(mode="json"),
        "start_date": announcement.start_date.isoformat(),
        "end_date": announcement.end_date.isoformat(),
        "show_on_homepage": announcement.show_on_homepage,
        "priority": announcement.priority,
        "is_active": announcement.is_active,
        "created_by_id": str(announcement.created_by_id) if announcement.created_by_id else None,
        "updated_by_id": str(announcement.updated_by_id) if announcement.updated_by_id else None,
        "created_at": announcement.created_at.isoformat(),
        "updated_at": announcement.updated_at.isoformat(),
    }


def _check_content(
    announcement_type: AnnouncementType,
    message: str | None,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    limit = MESSAGE_LIMITS[announcement_type]
    if message is not None and len(message) > limit:
        raise ValidationError(f"Message must be at most {limit} characters")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be on or after the start date")


async def _load_editable(db, announcement_id: uuid_pkg.UUID, admin: Admin) -> Announcement:
    """The announcement, if it exists and the admin may change it."""
    result = await announcement_ops.get_by_id(db, announcement_id)
    if not result.ok:
        raise NotFoundOrForbiddenError("Announcement")
    announcement = result.value
    kind = ContentKind(AnnouncementType(announcement.announcement_type).value)
    if not await can_edit(db, kind, announcement_id, admin):
        raise NotFoundOrForbiddenError("Announcement")
    return announcement


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────


@router.get("", response_model=list[dict])
async def list_announcements(
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    result = await announcement_ops.list_all(db)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")
    return [serialize_announcement(a) for a in result.value]


@router.get("/active", response_model=list[dict])
async def list_active_announcements(
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    """Announcements that are switched on and inside their display window."""
    result = await announcement_ops.list_active(db)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")
    return [serialize_announcement(a) for a in result.value]


@router.get("/{announcement_id}")
async def get_announcement(
    announcement_id: uuid_pkg.UUID,
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    result = await announcement_ops.get_by_id(db, announcement_id)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")
    return serialize_announcement(result.value)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Create an announcement. Its type is fixed from here on."""
    _check_content(data.announcement_type, data.message, data.start_date, data.end_date)

    result = await announcement_ops.create(db, data.model_dump(), current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")

    await events.emit(
        ContentSignal.CONTENT_LIST_CHANGED,
        kind=data.announcement_type.value,
        entity_id=result.value.id,
    )
    return serialize_announcement(result.value)


@router.patch("/{announcement_id}")
async def update_announcement(
    announcement_id: uuid_pkg.UUID,
    data: AnnouncementUpdate,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Update an announcement. Only its creator or a super-admin may."""
    current = await _load_editable(db, announcement_id, current_admin)
    announcement_type = AnnouncementType(current.announcement_type)

    changes = data.model_dump(exclude_unset=True)
    _check_content(
        announcement_type,
        changes.get("message"),
        changes.get("start_date", current.start_date),
        changes.get("end_date", current.end_date),
    )
    if changes.get("details") is not None:
        try:
            details = parse_details(announcement_type, changes["details"])
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {announcement_type.value} details") from e
        changes["details"] = details.model_dump(mode="json", exclude={"announcement_type"})

    result = await announcement_ops.update(db, announcement_id, changes, current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")

    await events.emit(
        ContentSignal.CONTENT_LIST_CHANGED,
        kind=announcement_type.value,
        entity_id=announcement_id,
    )
    return serialize_announcement(result.value)


@router.patch("/{announcement_id}/active")
async def set_announcement_active(
    announcement_id: uuid_pkg.UUID,
    body: ActiveToggle,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    current = await _load_editable(db, announcement_id, current_admin)

    result = await announcement_ops.toggle_active(db, announcement_id, body.is_active, current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Announcement")

    await events.emit(
        ContentSignal.CONTENT_LIST_CHANGED,
        kind=AnnouncementType(current.announcement_type).value,
        entity_id=announcement_id,
    )
    return serialize_announcement(result.value)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Delete an announcement. Deleting one that is already gone also answers 204."""
    existing = await announcement_ops.get_by_id(db, announcement_id)
    if not existing.ok:
        if existing.error.kind != StoreErrorKind.NOT_FOUND:
            raise_for_store_error(existing.error, "Announcement")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    current = existing.value
    kind = ContentKind(AnnouncementType(current.announcement_type).value)
    if not await can_edit(db, kind, announcement_id, current_admin):
        raise NotFoundOrForbiddenError("Announcement")

    result = await announcement_ops.delete(db, announcement_id, current_admin)
    if not result.ok and not result.error.is_benign:
        raise_for_store_error(result.error, "Announcement")

    await events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind=kind.value, entity_id=announcement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
