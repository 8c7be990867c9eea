"""Admin model - dashboard operators, mirrored from Supabase auth.users."""

import uuid as uuid_pkg
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, String, text
from sqlmodel import Field, SQLModel


class AdminRole(str, Enum):
    """Dashboard roles. Super-admins may edit any content."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MODERATOR = "moderator"


class AdminStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Admin(SQLModel, table=True):
    """
    Admin model - one row per dashboard operator.

    The id comes from Supabase Auth. Rows are created by a super-admin
    invite; a valid JWT without a matching active row is rejected.
    """

    __tablename__ = "admins"

    id: uuid_pkg.UUID = Field(
        primary_key=True,
        index=True,
        nullable=False,
        description="UUID from Supabase auth.users",
    )
    email: str = Field(max_length=255, nullable=False, index=True)
    name: str | None = Field(default=None, max_length=100)
    role: AdminRole = Field(
        default=AdminRole.ADMIN,
        sa_column=Column(String(20), nullable=False, server_default=text("'admin'")),
    )
    status: AdminStatus = Field(
        default=AdminStatus.ACTIVE,
        sa_column=Column(String(20), nullable=False, server_default=text("'active'")),
    )
    last_login: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )

    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )
    updated_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": text("now()")},
    )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == AdminStatus.ACTIVE


class AdminInvite(SQLModel):
    """Schema for inviting a new admin."""

    email: str = Field(max_length=255)
    name: str | None = Field(default=None, max_length=100)
    role: AdminRole = AdminRole.ADMIN
