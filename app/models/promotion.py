"""Promotion models - discount offers and their redemption history."""

import uuid as uuid_pkg
from datetime import UTC, datetime
from enum import Enum
from typing import ClassVar

from sqlalchemy import Column, DateTime, Index, String, Text, text
from sqlmodel import Field, SQLModel

from app.models.base import (
    AuditMixin,
    PartialUpdate,
    ScheduleMixin,
    TimestampMixin,
    UUIDMixin,
)


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"  # RWF, minor-unit-free currency
    BUY_X_GET_Y = "buy_x_get_y"


class Promotion(UUIDMixin, TimestampMixin, AuditMixin, ScheduleMixin, table=True):
    """
    A discount offer shown on the storefront and optionally redeemable by code.

    usage_count is maintained by the storefront's redemption RPC; this
    service only reads it.
    """

    __tablename__ = "promotions"
    __table_args__ = (
        Index("ix_promotions_code", "code", unique=True),
        Index("idx_promotions_active_window", "is_active", "start_date", "end_date"),
    )

    title: str = Field(max_length=60, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    discount_type: DiscountType = Field(
        default=DiscountType.PERCENTAGE,
        sa_column=Column(String(20), nullable=False, server_default=text("'percentage'")),
    )
    discount_value: float = Field(nullable=False)
    code: str | None = Field(default=None, sa_column=Column(String(20), nullable=True))
    min_purchase_amount: float = Field(default=0, nullable=False)
    max_discount_amount: float | None = Field(default=None, nullable=True)  # percentage only
    usage_limit: int = Field(default=0, nullable=False)  # 0 = unlimited
    usage_count: int = Field(
        default=0,
        nullable=False,
        sa_column_kwargs={"server_default": text("0")},
    )

    product_id: uuid_pkg.UUID | None = Field(
        default=None,
        foreign_key="products.id",
        nullable=True,
    )

    @property
    def usage_exhausted(self) -> bool:
        return self.usage_limit > 0 and self.usage_count >= self.usage_limit


class PromotionUsage(UUIDMixin, SQLModel, table=True):
    """One redemption of a promotion, written by the storefront checkout."""

    __tablename__ = "promotion_usage"
    __table_args__ = (Index("ix_promotion_usage_promotion", "promotion_id"),)

    promotion_id: uuid_pkg.UUID = Field(foreign_key="promotions.id", nullable=False)
    user_id: uuid_pkg.UUID = Field(nullable=False)
    order_id: uuid_pkg.UUID | None = Field(default=None, nullable=True)
    discount_amount: float = Field(nullable=False)
    used_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )


class PromotionCreate(SQLModel):
    """Schema for creating a promotion."""

    title: str = Field(min_length=1, max_length=60)
    description: str | None = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: float = Field(gt=0)
    code: str | None = Field(default=None, max_length=20)
    min_purchase_amount: float = Field(default=0, ge=0)
    max_discount_amount: float | None = Field(default=None, ge=0)
    usage_limit: int = Field(default=0, ge=0)
    product_id: uuid_pkg.UUID | None = None
    start_date: datetime
    end_date: datetime
    show_on_homepage: bool = True
    priority: int = Field(default=0, ge=0, le=10)
    is_active: bool = True


class PromotionUpdate(PartialUpdate):
    """Schema for updating a promotion. Only the fields sent are changed."""

    required_columns: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "discount_type",
            "discount_value",
            "min_purchase_amount",
            "usage_limit",
            "start_date",
            "end_date",
            "show_on_homepage",
            "priority",
            "is_active",
        }
    )

    title: str | None = Field(default=None, min_length=1, max_length=60)
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: float | None = Field(default=None, gt=0)
    code: str | None = Field(default=None, max_length=20)
    min_purchase_amount: float | None = Field(default=None, ge=0)
    max_discount_amount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=0)
    product_id: uuid_pkg.UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    show_on_homepage: bool | None = None
    priority: int | None = Field(default=None, ge=0, le=10)
    is_active: bool | None = None
