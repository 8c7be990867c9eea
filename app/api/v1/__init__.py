from app.api.v1 import (
    admins,
    announcements,
    content,
    drafts,
    products,
    promotions,
)

__all__ = [
    "promotions",
    "announcements",
    "content",
    "drafts",
    "products",
    "admins",
]
