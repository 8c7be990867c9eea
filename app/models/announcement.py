"""Announcement models - seasonal, informational and alert banners.

The three announcement types share one table. Type-specific fields live in
the `details` JSONB column as a tagged union keyed by `announcement_type`,
so a seasonal row can never carry alert fields.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, Field as PydanticField, TypeAdapter
from sqlalchemy import Column, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from app.models.base import (
    AuditMixin,
    PartialUpdate,
    ScheduleMixin,
    TimestampMixin,
    UUIDMixin,
)


class AnnouncementType(str, Enum):
    SEASONAL = "seasonal"
    INFO = "info"
    ALERT = "alert"


# Message length caps per type
MESSAGE_LIMITS: dict[AnnouncementType, int] = {
    AnnouncementType.SEASONAL: 200,
    AnnouncementType.INFO: 300,
    AnnouncementType.ALERT: 250,
}


class BackgroundColor(str, Enum):
    """Seasonal banner gradient palette."""

    PURPLE = "from-purple-500 to-purple-600"
    BLUE = "from-blue-500 to-blue-600"
    GREEN = "from-green-500 to-green-600"
    RED = "from-red-500 to-red-600"
    ORANGE = "from-orange-500 to-orange-600"
    PINK = "from-pink-500 to-pink-600"


class InfoCategory(str, Enum):
    UPDATE = "update"
    NEWS = "news"
    FEATURE = "feature"
    SERVICE = "service"


class Importance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertUrgency(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# Icon an alert gets when its urgency is picked
URGENCY_ICONS: dict[AlertUrgency, str] = {
    AlertUrgency.INFO: "ℹ️",
    AlertUrgency.WARNING: "⚠️",
    AlertUrgency.CRITICAL: "🚨",
}


class AlertCategory(str, Enum):
    SERVICE = "service"
    SECURITY = "security"
    MAINTENANCE = "maintenance"
    POLICY = "policy"


class SeasonalDetails(BaseModel):
    announcement_type: Literal["seasonal"] = "seasonal"
    subtitle: str | None = PydanticField(default=None, max_length=100)
    background_color: BackgroundColor = BackgroundColor.PURPLE


class InfoDetails(BaseModel):
    announcement_type: Literal["info"] = "info"
    category: InfoCategory | None = None
    importance: Importance | None = None
    additional_details: str | None = None
    contact_info: str | None = PydanticField(default=None, max_length=200)


class AlertDetails(BaseModel):
    announcement_type: Literal["alert"] = "alert"
    urgency: AlertUrgency | None = None
    alert_category: AlertCategory | None = None
    action_required: str | None = None
    contact_info: str | None = PydanticField(default=None, max_length=200)
    affected_areas: str | None = None
    alternative_options: str | None = None


AnnouncementDetails = Annotated[
    SeasonalDetails | InfoDetails | AlertDetails,
    PydanticField(discriminator="announcement_type"),
]

_details_adapter: TypeAdapter[SeasonalDetails | InfoDetails | AlertDetails] = TypeAdapter(
    AnnouncementDetails
)


def parse_details(
    announcement_type: AnnouncementType | str,
    raw: dict | None,
) -> SeasonalDetails | InfoDetails | AlertDetails:
    """Rebuild the typed details variant from a stored JSONB value."""
    data = dict(raw or {})
    data["announcement_type"] = AnnouncementType(announcement_type).value
    return _details_adapter.validate_python(data)


class Announcement(UUIDMixin, TimestampMixin, AuditMixin, ScheduleMixin, table=True):
    """A non-discount banner. The type is chosen once, at creation."""

    __tablename__ = "announcements"
    __table_args__ = (
        Index("idx_announcements_active_window", "is_active", "start_date", "end_date"),
    )

    announcement_type: AnnouncementType = Field(
        sa_column=Column(String(20), nullable=False),
    )
    title: str = Field(max_length=60, nullable=False)
    message: str = Field(sa_column=Column(Text, nullable=False))
    icon: str | None = Field(default=None, max_length=16)
    link_url: str | None = Field(default=None, max_length=500)
    link_text: str | None = Field(default=None, max_length=50)
    dismissible: bool = Field(default=True, nullable=False)
    details: dict | None = Field(default=None, sa_column=Column(JSONB, nullable=True))

    def typed_details(self) -> SeasonalDetails | InfoDetails | AlertDetails:
        return parse_details(self.announcement_type, self.details)


class AnnouncementCreate(SQLModel):
    """Schema for creating an announcement. `details` must match the type."""

    announcement_type: AnnouncementType
    title: str = Field(min_length=1, max_length=60)
    message: str = Field(min_length=1)
    icon: str | None = Field(default=None, max_length=16)
    link_url: str | None = Field(default=None, max_length=500)
    link_text: str | None = Field(default=None, max_length=50)
    dismissible: bool = True
    details: dict | None = None
    start_date: datetime
    end_date: datetime
    show_on_homepage: bool = True
    priority: int = Field(default=0, ge=0, le=10)
    is_active: bool = True


class AnnouncementUpdate(PartialUpdate):
    """Schema for updating an announcement. The type cannot be changed."""

    required_columns: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "message",
            "dismissible",
            "start_date",
            "end_date",
            "show_on_homepage",
            "priority",
            "is_active",
        }
    )

    title: str | None = Field(default=None, min_length=1, max_length=60)
    message: str | None = Field(default=None, min_length=1)
    icon: str | None = Field(default=None, max_length=16)
    link_url: str | None = Field(default=None, max_length=500)
    link_text: str | None = Field(default=None, max_length=50)
    dismissible: bool | None = None
    details: dict | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    show_on_homepage: bool | None = None
    priority: int | None = Field(default=None, ge=0, le=10)
    is_active: bool | None = None
