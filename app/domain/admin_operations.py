import asyncio
import logging
import re
import uuid as uuid_pkg
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.admin import Admin, AdminInvite, AdminStatus
from app.services.supabase import get_supabase_admin_client

logger = logging.getLogger(__name__)

# Simple email validation pattern (RFC 5322 simplified)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class InvalidEmailError(Exception):
    """Raised when email format is invalid."""

    pass


class AdminExistsError(Exception):
    """Raised when the invited email already belongs to an admin."""

    pass


class SupabaseInviteError(Exception):
    """Raised when Supabase invite fails."""

    pass


class AdminOperations:
    """Operations for Admin model."""

    async def get(self, db: AsyncSession, admin_id: uuid_pkg.UUID) -> Admin | None:
        """Get an admin by ID (the Supabase auth user id)."""
        statement = select(Admin).where(Admin.id == admin_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> Admin | None:
        statement = select(Admin).where(Admin.email == email.lower())
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def record_login(self, db: AsyncSession, admin: Admin) -> Admin:
        admin.last_login = datetime.now(UTC)
        db.add(admin)
        await db.flush()
        return admin

    async def invite(self, db: AsyncSession, invite: AdminInvite) -> Admin:
        """
        Invite a new admin by email.

        Supabase creates the auth.users record and sends the invite email;
        the admins row is created here with the returned user id.

        Raises:
            InvalidEmailError: If email format is invalid.
            AdminExistsError: If an admin with this email already exists.
            SupabaseInviteError: If Supabase API call fails.
        """
        email = invite.email.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise InvalidEmailError(f"Invalid email format: {email}")

        if await self.get_by_email(db, email):
            raise AdminExistsError(f"{email} is already an admin")

        try:
            supabase = get_supabase_admin_client()
            invite_options = {"redirect_to": f"{settings.frontend_url}/auth/callback"}

            # supabase-py is synchronous
            response = await asyncio.to_thread(
                supabase.auth.admin.invite_user_by_email, email, invite_options
            )
            supabase_user_id = uuid_pkg.UUID(response.user.id)
        except Exception as e:
            logger.error(f"Supabase invite failed for {email}: {e}")
            raise SupabaseInviteError("Failed to send invite email. Please try again later.") from e

        admin = Admin(
            id=supabase_user_id,
            email=email,
            name=invite.name,
            role=invite.role.value,
            status=AdminStatus.ACTIVE.value,
        )
        db.add(admin)
        await db.flush()
        await db.refresh(admin)
        logger.info(f"Invited admin {email} as {invite.role.value}")
        return admin


admin_ops = AdminOperations()
