"""API dependencies - re-exports from submodules."""

from app.core.events import get_event_bus

from .admin import require_role, require_super_admin
from .auth import (
    CurrentAdmin,
    DbSession,
    RlsSession,
    get_current_admin,
    get_db_with_rls,
    get_jwks,
    get_signing_key,
    security,
    verify_token,
)

__all__ = [
    # Auth
    "security",
    "get_jwks",
    "get_signing_key",
    "verify_token",
    "get_current_admin",
    "get_db_with_rls",
    "DbSession",
    "CurrentAdmin",
    "RlsSession",
    # Roles
    "require_role",
    "require_super_admin",
    # Events
    "get_event_bus",
]
