from app.domain.admin_operations import admin_ops
from app.domain.announcement_operations import announcement_ops
from app.domain.content_permissions import can_edit
from app.domain.product_operations import product_ops
from app.domain.promotion_operations import promotion_ops
from app.domain.results import StoreError, StoreErrorKind, StoreResult

__all__ = [
    "admin_ops",
    "announcement_ops",
    "promotion_ops",
    "product_ops",
    "can_edit",
    "StoreError",
    "StoreErrorKind",
    "StoreResult",
]
