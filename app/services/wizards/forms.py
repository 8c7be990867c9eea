"""Field state collected by the content wizards, one form per kind.

Forms validate on every change (lengths, ranges, enum values). The
cross-field checks that block submission live in submit_errors(), and
to_payload() turns a form into the record the store persists.
"""

import uuid as uuid_pkg
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.promotion_operations import normalize_code
from app.models.announcement import (
    MESSAGE_LIMITS,
    AlertCategory,
    AlertUrgency,
    Announcement,
    AnnouncementType,
    BackgroundColor,
    Importance,
    InfoCategory,
)
from app.models.content_kind import ContentKind
from app.models.promotion import DiscountType, Promotion

DEFAULT_RUN_DAYS = 30
END_OF_DAY = time(23, 59, 59)


def today() -> date:
    return datetime.now(UTC).date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=UTC)


def utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(UTC).date()


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _present(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


class ContentForm(BaseModel):
    """Fields every kind shares: title and the display window."""

    model_config = ConfigDict(extra="forbid")

    kind: ClassVar[ContentKind]

    title: str = Field(default="", max_length=60)
    start_date: date = Field(default_factory=today)
    end_date: date = Field(default_factory=lambda: today() + timedelta(days=DEFAULT_RUN_DAYS))
    show_on_homepage: bool = True
    priority: int = Field(default=0, ge=0, le=10)
    is_active: bool = True

    def with_changes(self, changes: dict[str, Any]) -> Self:
        """A re-validated copy with the changes applied."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def submit_errors(self) -> list[str]:
        errors = []
        if not self.title.strip():
            errors.append("Title is required")
        if self.end_date < self.start_date:
            errors.append("End date must be on or after the start date")
        return errors

    def _schedule_payload(self) -> dict[str, Any]:
        return {
            "start_date": start_of_day(self.start_date),
            "end_date": end_of_day(self.end_date),
            "show_on_homepage": self.show_on_homepage,
            "priority": self.priority,
            "is_active": self.is_active,
        }

    @staticmethod
    def _schedule_from(entity: Promotion | Announcement) -> dict[str, Any]:
        return {
            "title": entity.title,
            "start_date": utc_date(entity.start_date),
            "end_date": utc_date(entity.end_date),
            "show_on_homepage": entity.show_on_homepage,
            "priority": entity.priority,
            "is_active": entity.is_active,
        }

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError


class PromotionForm(ContentForm):
    kind: ClassVar[ContentKind] = ContentKind.PROMOTION

    description: str = ""
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: float = Field(default=0, ge=0)
    code: str = Field(default="", max_length=20)
    min_purchase_amount: float = Field(default=0, ge=0)
    max_discount_amount: float = Field(default=0, ge=0)  # 0 = no cap
    usage_limit: int = Field(default=0, ge=0)  # 0 = unlimited
    product_id: uuid_pkg.UUID | None = None

    def submit_errors(self) -> list[str]:
        errors = super().submit_errors()
        if self.discount_value <= 0:
            errors.append("Discount value must be greater than 0")
        elif self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            errors.append("Percentage discount cannot exceed 100")
        return errors

    def to_payload(self) -> dict[str, Any]:
        is_percentage = self.discount_type == DiscountType.PERCENTAGE
        return {
            "title": self.title.strip(),
            "description": blank_to_none(self.description),
            "discount_type": self.discount_type.value,
            "discount_value": self.discount_value,
            "code": normalize_code(self.code),
            "min_purchase_amount": self.min_purchase_amount,
            "max_discount_amount": (self.max_discount_amount or None) if is_percentage else None,
            "usage_limit": self.usage_limit,
            "product_id": self.product_id,
            **self._schedule_payload(),
        }

    @classmethod
    def from_promotion(cls, promotion: Promotion) -> Self:
        return cls.model_validate(
            _present(
                {
                    **cls._schedule_from(promotion),
                    "description": promotion.description,
                    "discount_type": promotion.discount_type,
                    "discount_value": promotion.discount_value,
                    "code": promotion.code,
                    "min_purchase_amount": promotion.min_purchase_amount,
                    "max_discount_amount": promotion.max_discount_amount,
                    "usage_limit": promotion.usage_limit,
                    "product_id": promotion.product_id,
                }
            )
        )


class AnnouncementForm(ContentForm):
    """Shared announcement fields. Subclasses add their detail fields."""

    announcement_type: ClassVar[AnnouncementType]
    detail_fields: ClassVar[tuple[str, ...]] = ()

    message: str = ""
    icon: str = Field(default="", max_length=16)
    link_url: str = Field(default="", max_length=500)
    link_text: str = Field(default="", max_length=50)
    dismissible: bool = True

    @model_validator(mode="after")
    def _check_message_length(self) -> Self:
        limit = MESSAGE_LIMITS[self.announcement_type]
        if len(self.message) > limit:
            raise ValueError(f"Message must be at most {limit} characters")
        return self

    def submit_errors(self) -> list[str]:
        errors = super().submit_errors()
        if not self.message.strip():
            errors.append("Message is required")
        return errors

    def details_payload(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", include=set(self.detail_fields))
        return {key: blank_to_none(v) if isinstance(v, str) else v for key, v in data.items()}

    def to_payload(self) -> dict[str, Any]:
        return {
            "announcement_type": self.announcement_type.value,
            "title": self.title.strip(),
            "message": self.message.strip(),
            "icon": blank_to_none(self.icon),
            "link_url": blank_to_none(self.link_url),
            "link_text": blank_to_none(self.link_text),
            "dismissible": self.dismissible,
            "details": self.details_payload(),
            **self._schedule_payload(),
        }

    @classmethod
    def from_announcement(cls, announcement: Announcement) -> Self:
        details = announcement.typed_details().model_dump(exclude={"announcement_type"})
        return cls.model_validate(
            _present(
                {
                    **cls._schedule_from(announcement),
                    "message": announcement.message,
                    "icon": announcement.icon,
                    "link_url": announcement.link_url,
                    "link_text": announcement.link_text,
                    "dismissible": announcement.dismissible,
                    **details,
                }
            )
        )


class SeasonalForm(AnnouncementForm):
    kind: ClassVar[ContentKind] = ContentKind.SEASONAL
    announcement_type: ClassVar[AnnouncementType] = AnnouncementType.SEASONAL
    detail_fields: ClassVar[tuple[str, ...]] = ("subtitle", "background_color")

    subtitle: str = Field(default="", max_length=100)
    background_color: BackgroundColor = BackgroundColor.PURPLE


class InfoForm(AnnouncementForm):
    kind: ClassVar[ContentKind] = ContentKind.INFO
    announcement_type: ClassVar[AnnouncementType] = AnnouncementType.INFO
    detail_fields: ClassVar[tuple[str, ...]] = (
        "category",
        "importance",
        "additional_details",
        "contact_info",
    )

    category: InfoCategory | None = None
    importance: Importance | None = None
    additional_details: str = ""
    contact_info: str = Field(default="", max_length=200)


class AlertForm(AnnouncementForm):
    kind: ClassVar[ContentKind] = ContentKind.ALERT
    announcement_type: ClassVar[AnnouncementType] = AnnouncementType.ALERT
    detail_fields: ClassVar[tuple[str, ...]] = (
        "urgency",
        "alert_category",
        "action_required",
        "contact_info",
        "affected_areas",
        "alternative_options",
    )

    urgency: AlertUrgency | None = None
    alert_category: AlertCategory | None = None
    action_required: str = ""
    contact_info: str = Field(default="", max_length=200)
    affected_areas: str = ""
    alternative_options: str = ""


FORM_TYPES: dict[ContentKind, type[ContentForm]] = {
    ContentKind.PROMOTION: PromotionForm,
    ContentKind.SEASONAL: SeasonalForm,
    ContentKind.INFO: InfoForm,
    ContentKind.ALERT: AlertForm,
}


def form_from_entity(entity: Promotion | Announcement) -> ContentForm:
    """Prefill the matching form from a stored promotion or announcement."""
    if isinstance(entity, Promotion):
        return PromotionForm.from_promotion(entity)
    kind = ContentKind(AnnouncementType(entity.announcement_type).value)
    form_type = FORM_TYPES[kind]
    return form_type.from_announcement(entity)  # type: ignore[attr-defined]
