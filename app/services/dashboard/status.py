"""Status derived from a content item's window and switch. Never stored."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DisplayStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UPCOMING = "upcoming"
    EXPIRED = "expired"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


@dataclass(frozen=True)
class DerivedStatus:
    is_active: bool
    expired: bool
    upcoming: bool

    @property
    def active(self) -> bool:
        """Switched on and not past its end date. Upcoming items count as active."""
        return self.is_active and not self.expired

    @property
    def badge(self) -> DisplayStatus:
        if self.expired:
            return DisplayStatus.EXPIRED
        if not self.is_active:
            return DisplayStatus.INACTIVE
        if self.upcoming:
            return DisplayStatus.UPCOMING
        return DisplayStatus.ACTIVE

    def matches(self, status_filter: StatusFilter) -> bool:
        if status_filter == StatusFilter.ACTIVE:
            return self.active
        if status_filter == StatusFilter.INACTIVE:
            return not self.is_active
        if status_filter == StatusFilter.EXPIRED:
            return self.expired
        return True


def derive_status(
    start_date: datetime,
    end_date: datetime,
    is_active: bool,
    now: datetime,
) -> DerivedStatus:
    return DerivedStatus(
        is_active=is_active,
        expired=end_date < now,
        upcoming=start_date > now,
    )


def matches_search(query: str, *texts: str | None) -> bool:
    """Case-insensitive substring match against any of the texts. Blank matches all."""
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in text.lower() for text in texts if text)


def discount_label(discount_type: str, discount_value: float) -> str:
    value = f"{discount_value:g}"
    if discount_type == "percentage":
        return f"{value}% OFF"
    if discount_type == "fixed_amount":
        return f"RWF {value} OFF"
    return "Buy X Get Y"
