"""Row-Level Security (RLS) context management.

The promotions and announcements policies read the acting admin from the
`app.current_user_id` setting (through the `app_user_id()` SQL helper created
in the RLS migration):

- any active admin can SELECT
- anyone can SELECT live rows (switched on and inside their window)
- INSERT requires `created_by_id = app_user_id()`
- UPDATE/DELETE require `created_by_id = app_user_id()` or `is_super_admin()`

A mutation that the policies reject therefore matches zero rows instead of
failing, which is why the store reports "not found or not permitted".
"""

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

# Key in AsyncSession.info remembering the admin the context was set for
RLS_USER_INFO_KEY = "rls_user_id"


async def set_rls_user_context(session: AsyncSession, user_id: UUID) -> None:
    """
    Set the acting admin for RLS policies.

    Uses SET LOCAL so the setting is transaction-scoped, which works with
    connection poolers like PgBouncer. It resets when the transaction ends.
    """
    await session.execute(
        text("SELECT set_config('app.current_user_id', :user_id, true)"),
        {"user_id": str(user_id)},
    )
    session.info[RLS_USER_INFO_KEY] = user_id


async def rollback_preserving_context(session: AsyncSession) -> None:
    """
    Roll back a failed transaction and re-apply the RLS user for the next one.

    A failed statement aborts the whole transaction, and the transaction-local
    setting goes with it. Without re-applying it, later reads in the same
    request would see no rows at all.
    """
    await session.rollback()
    user_id = session.info.get(RLS_USER_INFO_KEY)
    if isinstance(user_id, UUID):
        await set_rls_user_context(session, user_id)
