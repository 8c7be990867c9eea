"""Role hierarchy constants and utilities for dashboard admins."""

from app.models.admin import AdminRole

# Hierarchy levels for admin roles (higher = more privileges)
ROLE_HIERARCHY: dict[str, int] = {
    AdminRole.MODERATOR.value: 0,
    AdminRole.ADMIN.value: 1,
    AdminRole.SUPER_ADMIN.value: 2,
}


def get_role_level(role: str | AdminRole) -> int:
    """Get the hierarchy level for a role. Unknown roles rank lowest."""
    key = role.value if isinstance(role, AdminRole) else role
    return ROLE_HIERARCHY.get(key, 0)


def has_minimum_role(admin_role: str | AdminRole, required_role: AdminRole) -> bool:
    """Check if an admin's role meets or exceeds the required role level."""
    return get_role_level(admin_role) >= get_role_level(required_role)
