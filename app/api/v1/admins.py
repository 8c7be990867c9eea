"""Admin profile and super-admin invite endpoints."""

from fastapi import APIRouter, Depends, status

from app.api.deps import CurrentAdmin, DbSession, require_super_admin
from app.core.exceptions import ConflictError, ValidationError
from app.domain.admin_operations import (
    AdminExistsError,
    InvalidEmailError,
    SupabaseInviteError,
    admin_ops,
)
from app.models.admin import Admin, AdminInvite

router = APIRouter(prefix="/admins", tags=["admins"])


def _serialize_admin(admin: Admin) -> dict:
    return {
        "id": str(admin.id),
        "email": admin.email,
        "name": admin.name,
        "role": admin.role,
        "status": admin.status,
        "is_super_admin": admin.is_super_admin,
        "last_login": admin.last_login.isoformat() if admin.last_login else None,
        "created_at": admin.created_at.isoformat(),
    }


@router.get("/me")
async def get_me(current_admin: CurrentAdmin):
    """The signed-in admin's profile and role."""
    return _serialize_admin(current_admin)


@router.post("/me/login")
async def record_login(current_admin: CurrentAdmin, db: DbSession):
    """Stamp last_login. The dashboard calls this once after sign-in."""
    admin = await admin_ops.record_login(db, current_admin)
    return _serialize_admin(admin)


@router.post("/invite", status_code=status.HTTP_201_CREATED)
async def invite_admin(
    data: AdminInvite,
    db: DbSession,
    _super_admin: Admin = Depends(require_super_admin),
):
    """Invite a new admin by email. Super-admins only."""
    try:
        admin = await admin_ops.invite(db, data)
    except InvalidEmailError as e:
        raise ValidationError(str(e)) from e
    except AdminExistsError as e:
        raise ConflictError(str(e)) from e
    except SupabaseInviteError as e:
        raise ValidationError(str(e)) from e
    return _serialize_admin(admin)
