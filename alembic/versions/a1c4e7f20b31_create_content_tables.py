"""Create admins, products, promotions, promotion_usage and announcements

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-09-02 10:14:22.418305

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b31"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Admins mirror Supabase auth.users; rows are created by the invite flow
    op.create_table(
        "admins",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), server_default=sa.text("'admin'"), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default=sa.text("'active'"),
            nullable=False,
        ),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_admins_id"), "admins", ["id"], unique=False)
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=False)

    # Catalog products are owned by the storefront; promotions link to one
    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("image_url", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "promotions",
        sa.Column(
            "id",
            sa.Uuid(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        # Content
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=60), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        # Discount terms
        sa.Column(
            "discount_type",
            sa.String(length=20),
            server_default=sa.text("'percentage'"),
            nullable=False,
        ),
        sa.Column("discount_value", sa.Float(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=True),
        sa.Column("min_purchase_amount", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("max_discount_amount", sa.Float(), nullable=True),
        sa.Column("usage_limit", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("usage_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=True),
        # Schedule and placement
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("show_on_homepage", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("priority", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        # Audit
        sa.Column("created_by_id", sa.Uuid(), nullable=True),
        sa.Column("updated_by_id", sa.Uuid(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("priority BETWEEN 0 AND 10", name="ck_promotions_priority"),
        sa.CheckConstraint("end_date >= start_date", name="ck_promotions_window"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by_id"], ["admins.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by_id"], ["admins.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_promotions_id"), "promotions", ["id"], unique=False)
    op.create_index(
        op.f("ix_promotions_created_by_id"), "promotions", ["created_by_id"], unique=False
    )
    # Codes are stored upper-cased; NULLs do not collide
    op.create_index("ix_promotions_code", "promotions", ["code"], unique=True)
    op.create_index(
        "idx_promotions_active_window",
        "promotions",
        ["is_active", "start_date", "end_date"],
        unique=False,
    )

    # Redemptions are written by the storefront checkout
    op.create_table(
        "promotion_usage",
        sa.Column(
            "id",
            sa.Uuid(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("promotion_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("discount_amount", sa.Float(), nullable=False),
        sa.Column(
            "used_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["promotion_id"], ["promotions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_promotion_usage_id"), "promotion_usage", ["id"], unique=False)
    op.create_index(
        "ix_promotion_usage_promotion", "promotion_usage", ["promotion_id"], unique=False
    )

    op.create_table(
        "announcements",
        sa.Column(
            "id",
            sa.Uuid(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("announcement_type", sa.String(length=20), nullable=False),
        # Content
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=60), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("icon", sqlmodel.sql.sqltypes.AutoString(length=16), nullable=True),
        sa.Column("link_url", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("link_text", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column("dismissible", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        # Type-specific fields, tagged by announcement_type
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        # Schedule and placement
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("show_on_homepage", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("priority", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        # Audit
        sa.Column("created_by_id", sa.Uuid(), nullable=True),
        sa.Column("updated_by_id", sa.Uuid(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "announcement_type IN ('seasonal', 'info', 'alert')",
            name="ck_announcements_type",
        ),
        sa.CheckConstraint("priority BETWEEN 0 AND 10", name="ck_announcements_priority"),
        sa.CheckConstraint("end_date >= start_date", name="ck_announcements_window"),
        sa.ForeignKeyConstraint(["created_by_id"], ["admins.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by_id"], ["admins.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_announcements_id"), "announcements", ["id"], unique=False)
    op.create_index(
        op.f("ix_announcements_created_by_id"),
        "announcements",
        ["created_by_id"],
        unique=False,
    )
    op.create_index(
        "idx_announcements_active_window",
        "announcements",
        ["is_active", "start_date", "end_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_announcements_active_window", table_name="announcements")
    op.drop_index(op.f("ix_announcements_created_by_id"), table_name="announcements")
    op.drop_index(op.f("ix_announcements_id"), table_name="announcements")
    op.drop_table("announcements")

    op.drop_index("ix_promotion_usage_promotion", table_name="promotion_usage")
    op.drop_index(op.f("ix_promotion_usage_id"), table_name="promotion_usage")
    op.drop_table("promotion_usage")

    op.drop_index("idx_promotions_active_window", table_name="promotions")
    op.drop_index("ix_promotions_code", table_name="promotions")
    op.drop_index(op.f("ix_promotions_created_by_id"), table_name="promotions")
    op.drop_index(op.f("ix_promotions_id"), table_name="promotions")
    op.drop_table("promotions")

    op.drop_table("products")

    op.drop_index(op.f("ix_admins_email"), table_name="admins")
    op.drop_index(op.f("ix_admins_id"), table_name="admins")
    op.drop_table("admins")
