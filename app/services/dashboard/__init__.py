from app.services.dashboard.status import (
    DerivedStatus,
    DisplayStatus,
    StatusFilter,
    derive_status,
    matches_search,
)
from app.services.dashboard.view import ContentDashboard, ContentItem

__all__ = [
    "ContentDashboard",
    "ContentItem",
    "DerivedStatus",
    "DisplayStatus",
    "StatusFilter",
    "derive_status",
    "matches_search",
]
