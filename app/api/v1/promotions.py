"""Promotion endpoints: discount offers managed from the dashboard."""

import uuid as uuid_pkg
from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from app.api.deps import CurrentAdmin, RlsSession
from app.core.events import ContentEventBus, ContentSignal, get_event_bus
from app.core.exceptions import NotFoundOrForbiddenError, ValidationError, raise_for_store_error
from app.domain import StoreErrorKind, can_edit, promotion_ops
from app.models.content_kind import ContentKind
from app.models.promotion import (
    DiscountType,
    Promotion,
    PromotionCreate,
    PromotionUpdate,
    PromotionUsage,
)

router = APIRouter(prefix="/promotions", tags=["promotions"])


class ActiveToggle(BaseModel):
    is_active: bool


def serialize_promotion(promotion: Promotion) -> dict:
    """Serialize a promotion to a dict response."""
    return {
        "id": str(promotion.id),
        "title": promotion.title,
        "description": promotion.description,
        "discount_type": promotion.discount_type,
        "discount_value": promotion.discount_value,
        "code": promotion.code,
        "min_purchase_amount": promotion.min_purchase_amount,
        "max_discount_amount": promotion.max_discount_amount,
        "usage_limit": promotion.usage_limit,
        "usage_count": promotion.usage_count,
        "product_id": str(promotion.product_id) if promotion.product_id else None,
        "start_date": promotion.start_date.isoformat(),
        "end_date": promotion.end_date.isoformat(),
        "show_on_homepage": promotion.show_on_homepage,
        "priority": promotion.priority,
        "is_active": promotion.is_active,
        "created_by_id": str(promotion.created_by_id) if promotion.created_by_id else None,
        "updated_by_id": str(promotion.updated_by_id) if promotion.updated_by_id else None,
        "created_at": promotion.created_at.isoformat(),
        "updated_at": promotion.updated_at.isoformat(),
    }


def _serialize_usage(usage: PromotionUsage) -> dict:
    return {
        "id": str(usage.id),
        "promotion_id": str(usage.promotion_id),
        "user_id": str(usage.user_id),
        "order_id": str(usage.order_id) if usage.order_id else None,
        "discount_amount": usage.discount_amount,
        "used_at": usage.used_at.isoformat(),
    }


def _check_terms(
    discount_type: DiscountType | None,
    discount_value: float | None,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be on or after the start date")
    if discount_type == DiscountType.PERCENTAGE and discount_value and discount_value > 100:
        raise ValidationError("Percentage discount cannot exceed 100")


async def _require_editable(db, promotion_id: uuid_pkg.UUID, admin) -> None:
    if not await can_edit(db, ContentKind.PROMOTION, promotion_id, admin):
        raise NotFoundOrForbiddenError("Promotion")


@router.get("", response_model=list[dict])
async def list_promotions(
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    """All promotions, highest priority first."""
    result = await promotion_ops.list_all(db)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")
    return [serialize_promotion(p) for p in result.value]


@router.get("/active", response_model=list[dict])
async def list_active_promotions(
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    """Promotions that are switched on and inside their display window."""
    result = await promotion_ops.list_active(db)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")
    return [serialize_promotion(p) for p in result.value]


@router.get("/code/{code}")
async def get_promotion_by_code(
    code: str,
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    """Check a promotion code the way checkout would. 409 when its usage limit is reached."""
    result = await promotion_ops.get_by_code(db, code)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion code")
    return serialize_promotion(result.value)


@router.get("/{promotion_id}")
async def get_promotion(
    promotion_id: uuid_pkg.UUID,
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    result = await promotion_ops.get_by_id(db, promotion_id)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")
    return serialize_promotion(result.value)


@router.get("/{promotion_id}/usage", response_model=list[dict])
async def list_promotion_usage(
    promotion_id: uuid_pkg.UUID,
    _current_admin: CurrentAdmin,
    db: RlsSession,
):
    """Redemptions of a promotion, newest first. Read-only."""
    result = await promotion_ops.get_usage(db, promotion_id)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")
    return [_serialize_usage(u) for u in result.value]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_promotion(
    data: PromotionCreate,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Create a promotion. The code, if any, is stored upper-cased and must be unique."""
    _check_terms(data.discount_type, data.discount_value, data.start_date, data.end_date)

    result = await promotion_ops.create(db, data.model_dump(), current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")

    await events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind="promotion", entity_id=result.value.id)
    return serialize_promotion(result.value)


@router.patch("/{promotion_id}")
async def update_promotion(
    promotion_id: uuid_pkg.UUID,
    data: PromotionUpdate,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Update a promotion. Only its creator or a super-admin may."""
    await _require_editable(db, promotion_id, current_admin)

    changes = data.model_dump(exclude_unset=True)
    if {"start_date", "end_date", "discount_type", "discount_value"} & changes.keys():
        current = await promotion_ops.get_by_id(db, promotion_id)
        if not current.ok:
            raise_for_store_error(current.error, "Promotion")
        _check_terms(
            changes.get("discount_type", current.value.discount_type),
            changes.get("discount_value", current.value.discount_value),
            changes.get("start_date", current.value.start_date),
            changes.get("end_date", current.value.end_date),
        )

    result = await promotion_ops.update(db, promotion_id, changes, current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")

    await events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind="promotion", entity_id=promotion_id)
    return serialize_promotion(result.value)


@router.patch("/{promotion_id}/active")
async def set_promotion_active(
    promotion_id: uuid_pkg.UUID,
    body: ActiveToggle,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Switch a promotion on or off."""
    await _require_editable(db, promotion_id, current_admin)

    result = await promotion_ops.toggle_active(db, promotion_id, body.is_active, current_admin)
    if not result.ok:
        raise_for_store_error(result.error, "Promotion")

    await events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind="promotion", entity_id=promotion_id)
    return serialize_promotion(result.value)


@router.delete("/{promotion_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promotion(
    promotion_id: uuid_pkg.UUID,
    current_admin: CurrentAdmin,
    db: RlsSession,
    events: ContentEventBus = Depends(get_event_bus),
):
    """Delete a promotion. Deleting one that is already gone also answers 204."""
    existing = await promotion_ops.get_by_id(db, promotion_id)
    if not existing.ok:
        if existing.error.kind != StoreErrorKind.NOT_FOUND:
            raise_for_store_error(existing.error, "Promotion")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    await _require_editable(db, promotion_id, current_admin)

    result = await promotion_ops.delete(db, promotion_id, current_admin)
    if not result.ok and not result.error.is_benign:
        raise_for_store_error(result.error, "Promotion")

    await events.emit(ContentSignal.CONTENT_LIST_CHANGED, kind="promotion", entity_id=promotion_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
