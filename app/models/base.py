import uuid as uuid_pkg
from datetime import UTC, datetime
from typing import ClassVar, Self

from pydantic import model_validator
from sqlalchemy import DateTime, text
from sqlmodel import Field, SQLModel


class UUIDMixin(SQLModel):
    """Mixin providing UUID primary key."""

    id: uuid_pkg.UUID = Field(
        default_factory=uuid_pkg.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
        sa_column_kwargs={"server_default": text("gen_random_uuid()")},
    )


class TimestampMixin(SQLModel):
    """Mixin providing created_at and updated_at timestamps (TIMESTAMPTZ)."""

    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )


class AuditMixin(SQLModel):
    """Mixin stamping the admin who created and last updated a row.

    RLS policies compare created_by_id with app_user_id() to decide who may
    update or delete.
    """

    created_by_id: uuid_pkg.UUID | None = Field(
        default=None,
        foreign_key="admins.id",
        nullable=True,
        index=True,
    )
    updated_by_id: uuid_pkg.UUID | None = Field(
        default=None,
        foreign_key="admins.id",
        nullable=True,
    )


class ScheduleMixin(SQLModel):
    """Display window, homepage placement and activation shared by all content."""

    start_date: datetime = Field(  # type: ignore[call-overload]
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    end_date: datetime = Field(  # type: ignore[call-overload]
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    show_on_homepage: bool = Field(default=True, nullable=False)
    priority: int = Field(default=0, ge=0, le=10, nullable=False)  # higher first
    is_active: bool = Field(default=True, nullable=False)


class PartialUpdate(SQLModel):
    """Base for PATCH schemas. Fields sent as null must map to nullable columns."""

    required_columns: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_cleared_required(self) -> Self:
        cleared = sorted(
            name
            for name in self.model_fields_set & self.required_columns
            if getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self
