"""Role-based admin dependencies."""

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status

from app.core.roles import has_minimum_role
from app.models.admin import Admin, AdminRole

from .auth import get_current_admin


def require_role(minimum: AdminRole) -> Callable[..., Awaitable[Admin]]:
    """Build a dependency that requires at least the given admin role."""

    async def dependency(current_admin: Admin = Depends(get_current_admin)) -> Admin:
        if not has_minimum_role(current_admin.role, minimum):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{minimum.value.replace('_', ' ').title()} access required",
            )
        return current_admin

    return dependency


require_super_admin = require_role(AdminRole.SUPER_ADMIN)
