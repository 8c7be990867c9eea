"""Wizard draft endpoints: choose a kind, fill four steps, submit."""

import uuid as uuid_pkg
from typing import Any, Literal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.api.deps import CurrentAdmin, RlsSession
from app.api.v1.announcements import serialize_announcement
from app.api.v1.promotions import serialize_promotion
from app.core.events import ContentEventBus, get_event_bus
from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    NotFoundOrForbiddenError,
    ValidationError,
    raise_for_store_error,
)
from app.domain import announcement_ops, can_edit, promotion_ops
from app.models.admin import Admin
from app.models.content_kind import ContentKind
from app.models.promotion import Promotion
from app.services.wizards import (
    DraftNotFoundError,
    DraftRegistry,
    WizardSession,
    WizardStateError,
    draft_registry,
    submit_wizard,
)
from app.services.wizards.session import kind_of

router = APIRouter(prefix="/drafts", tags=["drafts"])


def get_draft_registry() -> DraftRegistry:
    return draft_registry


# ─────────────────────────────────────────────────────────────────────────────
# Schemas
# ─────────────────────────────────────────────────────────────────────────────


class DraftOpen(BaseModel):
    """Open a draft. Leave both fields empty to start from the kind chooser."""

    family: Literal["promotion", "announcement"] | None = None
    entity_id: uuid_pkg.UUID | None = None


class KindChoice(BaseModel):
    kind: ContentKind


class FieldChanges(BaseModel):
    fields: dict[str, Any]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _serialize_session(session: WizardSession) -> dict:
    stepper = session.stepper
    return {
        "id": str(session.id),
        "kind": session.kind.value if session.kind else None,
        "editing": session.is_editing,
        "entity_id": str(session.entity_id) if session.entity_id else None,
        "in_chooser": session.in_chooser,
        "kinds": [k.value for k in ContentKind] if session.in_chooser else [],
        "closed": session.is_closed,
        "step": stepper.current if stepper else None,
        "total_steps": stepper.total if stepper else None,
        "steps": [
            {"number": n, "title": step.title, "fields": list(step.fields)}
            for n, step in enumerate(stepper.steps, start=1)
        ]
        if stepper
        else [],
        "can_advance": stepper.can_advance(session.form) if stepper else False,
        "fields": session.form.model_dump(mode="json") if session.form else None,
        "updated_at": session.updated_at.isoformat(),
    }


def _get_session(registry: DraftRegistry, admin: Admin, draft_id: uuid_pkg.UUID) -> WizardSession:
    try:
        return registry.get(admin.id, draft_id)
    except DraftNotFoundError:
        raise NotFoundError("Draft") from None


async def _load_for_edit(db, admin: Admin, data: DraftOpen):
    ops = promotion_ops if data.family == "promotion" else announcement_ops
    result = await ops.get_by_id(db, data.entity_id)
    if not result.ok:
        raise NotFoundOrForbiddenError(data.family.capitalize())  # type: ignore[union-attr]
    entity = result.value
    if not await can_edit(db, kind_of(entity), entity.id, admin):
        raise NotFoundOrForbiddenError(data.family.capitalize())  # type: ignore[union-attr]
    return entity


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────


@router.post("", status_code=status.HTTP_201_CREATED)
async def open_draft(
    data: DraftOpen,
    current_admin: CurrentAdmin,
    db: RlsSession,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    """Start a new draft, or reopen existing content for editing."""
    if (data.family is None) != (data.entity_id is None):
        raise ValidationError("family and entity_id go together")

    entity = await _load_for_edit(db, current_admin, data) if data.entity_id else None
    session = registry.open(current_admin.id, entity)
    return _serialize_session(session)


@router.get("", response_model=list[dict])
async def list_drafts(
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    return [_serialize_session(s) for s in registry.list_for(current_admin.id)]


@router.get("/{draft_id}")
async def get_draft(
    draft_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    return _serialize_session(_get_session(registry, current_admin, draft_id))


@router.post("/{draft_id}/kind")
async def choose_kind(
    draft_id: uuid_pkg.UUID,
    body: KindChoice,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    session = _get_session(registry, current_admin, draft_id)
    try:
        session.choose(body.kind)
    except WizardStateError as e:
        raise ConflictError(str(e)) from e
    return _serialize_session(session)


@router.patch("/{draft_id}/fields")
async def update_fields(
    draft_id: uuid_pkg.UUID,
    body: FieldChanges,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    """Edit draft fields. Values are checked immediately; bad ones answer 400."""
    session = _get_session(registry, current_admin, draft_id)
    try:
        session.update(body.fields)
    except WizardStateError as e:
        raise ConflictError(str(e)) from e
    except PydanticValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'form'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(messages) from e
    return _serialize_session(session)


@router.post("/{draft_id}/next")
async def next_step(
    draft_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    """Advance if the current step is complete. `advanced` says whether it moved."""
    session = _get_session(registry, current_admin, draft_id)
    try:
        advanced = session.next()
    except WizardStateError as e:
        raise ConflictError(str(e)) from e
    return {**_serialize_session(session), "advanced": advanced}


@router.post("/{draft_id}/previous")
async def previous_step(
    draft_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    """Go back a step. From step 1 a new draft returns to the chooser; an edit is cancelled."""
    session = _get_session(registry, current_admin, draft_id)
    try:
        session.previous()
    except WizardStateError as e:
        raise ConflictError(str(e)) from e
    if session.cancelled:
        registry.discard(current_admin.id, draft_id)
    return _serialize_session(session)


@router.post("/{draft_id}/steps/{step}")
async def go_to_step(
    draft_id: uuid_pkg.UUID,
    step: int,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    """Jump to any step, as the step indicator does. Submit still validates everything."""
    session = _get_session(registry, current_admin, draft_id)
    try:
        session.go_to(step)
    except WizardStateError as e:
        raise ConflictError(str(e)) from e
    return _serialize_session(session)


@router.post("/{draft_id}/submit")
async def submit_draft(
    draft_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    db: RlsSession,
    registry: DraftRegistry = Depends(get_draft_registry),
    events: ContentEventBus = Depends(get_event_bus),
):
    """Validate and save the draft. A saved draft is closed and forgotten."""
    session = _get_session(registry, current_admin, draft_id)
    try:
        outcome = await submit_wizard(db, session, current_admin, events)
    except WizardStateError as e:
        raise ConflictError(str(e)) from e

    kind = session.kind or ContentKind.PROMOTION
    if not outcome.ok:
        raise_for_store_error(outcome.result.error, kind.family.capitalize())

    registry.discard(current_admin.id, draft_id)
    entity = outcome.result.value
    return {
        "kind": kind.value,
        "entity": serialize_promotion(entity)
        if isinstance(entity, Promotion)
        else serialize_announcement(entity),
        "notice": {"level": outcome.notice.level.value, "message": outcome.notice.message},
    }


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(
    draft_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    try:
        registry.discard(current_admin.id, draft_id)
    except DraftNotFoundError:
        raise NotFoundError("Draft") from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
