"""Add RLS helper functions and policies for content tables

Revision ID: b7d2f9a4c613
Revises: a1c4e7f20b31
Create Date: 2026-09-02 11:02:47.903114

Policies on promotions and announcements:
- Active admins can read everything
- Anyone can read active rows inside their display window (storefront feeds)
- Admins insert rows stamped with their own id
- The creator or a super-admin can update and delete

The backend sets `app.current_user_id` per transaction (see app/core/rls.py).
"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7d2f9a4c613"
down_revision: str | None = "a1c4e7f20b31"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


CONTENT_TABLES = ("promotions", "announcements")


def upgrade() -> None:
    # =========================================================================
    # HELPER FUNCTIONS
    # =========================================================================

    # Returns the current user ID from the session context, NULL when unset
    op.execute("""
        CREATE OR REPLACE FUNCTION app_user_id()
        RETURNS UUID AS $$
            SELECT NULLIF(current_setting('app.current_user_id', true), '')::uuid
        $$ LANGUAGE sql STABLE
    """)

    op.execute("""
        COMMENT ON FUNCTION app_user_id() IS
            'Returns the current admin ID from app.current_user_id, '
            'or NULL if not set. Used in RLS policies.'
    """)

    # SECURITY DEFINER so the lookup is not itself filtered by RLS on admins
    op.execute("""
        CREATE OR REPLACE FUNCTION is_active_admin()
        RETURNS BOOLEAN AS $$
            SELECT EXISTS (
                SELECT 1 FROM admins
                WHERE id = app_user_id()
                AND status = 'active'
            );
        $$ LANGUAGE sql STABLE SECURITY DEFINER
    """)

    op.execute("""
        COMMENT ON FUNCTION is_active_admin() IS
            'Returns TRUE if the current user has an active admins row.'
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION is_super_admin()
        RETURNS BOOLEAN AS $$
            SELECT EXISTS (
                SELECT 1 FROM admins
                WHERE id = app_user_id()
                AND status = 'active'
                AND role = 'super_admin'
            );
        $$ LANGUAGE sql STABLE SECURITY DEFINER
    """)

    op.execute("""
        COMMENT ON FUNCTION is_super_admin() IS
            'Returns TRUE if the current user is an active super-admin. '
            'Super-admins may update and delete any content.'
    """)

    # =========================================================================
    # 1. ADMINS TABLE
    # =========================================================================
    # Active admins can see the admin list. Writes go through the service role
    # (invite flow) or the admin's own row (last_login).
    # =========================================================================

    op.execute("ALTER TABLE admins ENABLE ROW LEVEL SECURITY")

    op.execute("""
        CREATE POLICY admins_admin_select ON admins
            FOR SELECT
            USING (id = app_user_id() OR is_active_admin())
    """)

    op.execute("""
        CREATE POLICY admins_super_admin_insert ON admins
            FOR INSERT
            WITH CHECK (is_super_admin())
    """)

    op.execute("""
        CREATE POLICY admins_self_update ON admins
            FOR UPDATE
            USING (id = app_user_id() OR is_super_admin())
            WITH CHECK (id = app_user_id() OR is_super_admin())
    """)

    # =========================================================================
    # 2. PROMOTIONS AND ANNOUNCEMENTS
    # =========================================================================
    # Same rules for both content tables.
    # =========================================================================

    for table in CONTENT_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")

        # Policy: Active admins can view all content, including drafts and expired rows
        op.execute(f"""
            CREATE POLICY {table}_admin_select ON {table}
                FOR SELECT
                USING (is_active_admin())
        """)

        # Policy: The storefront can view live content
        op.execute(f"""
            CREATE POLICY {table}_public_select ON {table}
                FOR SELECT
                USING (is_active AND start_date <= now() AND end_date >= now())
        """)

        # Policy: Admins create content under their own id
        op.execute(f"""
            CREATE POLICY {table}_admin_insert ON {table}
                FOR INSERT
                WITH CHECK (is_active_admin() AND created_by_id = app_user_id())
        """)

        # Policy: Creator or super-admin can update
        op.execute(f"""
            CREATE POLICY {table}_owner_update ON {table}
                FOR UPDATE
                USING (created_by_id = app_user_id() OR is_super_admin())
                WITH CHECK (created_by_id = app_user_id() OR is_super_admin())
        """)

        # Policy: Creator or super-admin can delete
        op.execute(f"""
            CREATE POLICY {table}_owner_delete ON {table}
                FOR DELETE
                USING (created_by_id = app_user_id() OR is_super_admin())
        """)

    # =========================================================================
    # 3. READ-ONLY TABLES
    # =========================================================================
    # promotion_usage is written by checkout and products by the catalog,
    # both with the service role. Admins only read them.
    # =========================================================================

    op.execute("ALTER TABLE promotion_usage ENABLE ROW LEVEL SECURITY")

    op.execute("""
        CREATE POLICY promotion_usage_admin_select ON promotion_usage
            FOR SELECT
            USING (is_active_admin())
    """)

    op.execute("ALTER TABLE products ENABLE ROW LEVEL SECURITY")

    op.execute("""
        CREATE POLICY products_public_select ON products
            FOR SELECT
            USING (true)
    """)


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS products_public_select ON products")
    op.execute("ALTER TABLE products DISABLE ROW LEVEL SECURITY")

    op.execute("DROP POLICY IF EXISTS promotion_usage_admin_select ON promotion_usage")
    op.execute("ALTER TABLE promotion_usage DISABLE ROW LEVEL SECURITY")

    for table in reversed(CONTENT_TABLES):
        op.execute(f"DROP POLICY IF EXISTS {table}_owner_delete ON {table}")
        op.execute(f"DROP POLICY IF EXISTS {table}_owner_update ON {table}")
        op.execute(f"DROP POLICY IF EXISTS {table}_admin_insert ON {table}")
        op.execute(f"DROP POLICY IF EXISTS {table}_public_select ON {table}")
        op.execute(f"DROP POLICY IF EXISTS {table}_admin_select ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")

    op.execute("DROP POLICY IF EXISTS admins_self_update ON admins")
    op.execute("DROP POLICY IF EXISTS admins_super_admin_insert ON admins")
    op.execute("DROP POLICY IF EXISTS admins_admin_select ON admins")
    op.execute("ALTER TABLE admins DISABLE ROW LEVEL SECURITY")

    op.execute("DROP FUNCTION IF EXISTS is_super_admin()")
    op.execute("DROP FUNCTION IF EXISTS is_active_admin()")
    op.execute("DROP FUNCTION IF EXISTS app_user_id()")
