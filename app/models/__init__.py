from app.models.admin import Admin, AdminInvite, AdminRole, AdminStatus
from app.models.announcement import (
    MESSAGE_LIMITS,
    URGENCY_ICONS,
    AlertCategory,
    AlertDetails,
    AlertUrgency,
    Announcement,
    AnnouncementCreate,
    AnnouncementDetails,
    AnnouncementType,
    AnnouncementUpdate,
    BackgroundColor,
    Importance,
    InfoCategory,
    InfoDetails,
    SeasonalDetails,
    parse_details,
)
from app.models.content_kind import ContentKind
from app.models.product import Product, ProductSummary
from app.models.promotion import (
    DiscountType,
    Promotion,
    PromotionCreate,
    PromotionUpdate,
    PromotionUsage,
)

__all__ = [
    "Admin",
    "AdminInvite",
    "AdminRole",
    "AdminStatus",
    "ContentKind",
    "Announcement",
    "AnnouncementType",
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "AnnouncementDetails",
    "SeasonalDetails",
    "InfoDetails",
    "AlertDetails",
    "BackgroundColor",
    "InfoCategory",
    "Importance",
    "AlertUrgency",
    "AlertCategory",
    "MESSAGE_LIMITS",
    "URGENCY_ICONS",
    "parse_details",
    "Product",
    "ProductSummary",
    "Promotion",
    "PromotionUsage",
    "PromotionCreate",
    "PromotionUpdate",
    "DiscountType",
]
