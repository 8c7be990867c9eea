"""JWT validation and admin authentication dependencies.

This module provides:
- JWT validation against Supabase JWKS
- Admin lookup (a valid token alone is not enough; the admin row must be active)
- RLS-aware database session dependency
"""

import logging
import time
import uuid as uuid_pkg
from collections.abc import AsyncGenerator
from typing import Annotated, Any

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from jose.backends import ECKey
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.rls import set_rls_user_context
from app.domain.admin_operations import admin_ops
from app.models.admin import Admin

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cache for JWKS with TTL to handle key rotation
_jwks_cache: dict[str, Any] = {}
_jwks_cache_timestamp: float = 0.0
_JWKS_CACHE_TTL_SECONDS: float = 3600.0  # 1 hour


async def _fetch_jwks() -> dict[str, Any]:
    """Fetch JWKS from Supabase and update the cache."""
    global _jwks_cache_timestamp
    async with httpx.AsyncClient() as client:
        response = await client.get(settings.supabase_jwks_url)
        response.raise_for_status()
        jwks = response.json()
        _jwks_cache.clear()
        _jwks_cache.update(jwks)
        _jwks_cache_timestamp = time.monotonic()
        return jwks


async def get_jwks(force_refresh: bool = False) -> dict[str, Any]:
    """Fetch and cache JWKS from Supabase with a 1-hour TTL."""
    cache_age = time.monotonic() - _jwks_cache_timestamp
    if _jwks_cache and not force_refresh and cache_age < _JWKS_CACHE_TTL_SECONDS:
        return _jwks_cache

    return await _fetch_jwks()


def get_signing_key(jwks: dict[str, Any], token: str) -> ECKey:
    """Get the signing key from JWKS that matches the token's kid."""
    unverified_header = jwt.get_unverified_header(token)
    kid = unverified_header.get("kid")

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return ECKey(key, algorithm="ES256")

    raise ValueError("Unable to find matching key in JWKS")


def _subject(jwks: dict[str, Any], token: str) -> uuid_pkg.UUID:
    signing_key = get_signing_key(jwks, token)
    payload = jwt.decode(token, signing_key, algorithms=["ES256"], audience="authenticated")
    subject: str | None = payload.get("sub")
    if subject is None:
        raise ValueError("Token has no subject")
    return uuid_pkg.UUID(subject)


async def verify_token(token: str) -> uuid_pkg.UUID:
    """Validate a Supabase JWT and return its user id. Raises 401 on any failure."""
    try:
        return _subject(await get_jwks(), token)
    except (JWTError, ValueError) as first_error:
        # Key rotation may have occurred - force a JWKS refresh and retry once
        try:
            logger.info("JWT validation failed with cached JWKS, forcing refresh")
            return _subject(await get_jwks(force_refresh=True), token)
        except (JWTError, ValueError, httpx.HTTPError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
            ) from first_error
    except httpx.HTTPError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from None


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """
    Validate Supabase JWT and return the matching active admin.

    Signed-in users without an admins row, or whose row is not active,
    get 403.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    admin_id = await verify_token(credentials.credentials)

    admin = await admin_ops.get(db, admin_id)
    if admin is None or not admin.is_active:
        logger.info(f"Rejected dashboard access for user {admin_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return admin


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentAdmin = Annotated[Admin, Depends(get_current_admin)]


async def get_db_with_rls(
    db: DbSession,
    current_admin: CurrentAdmin,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session with RLS user context automatically set.

    The promotions and announcements policies read the acting admin from
    this context, so every dashboard endpoint that touches content uses it.

    The RLS context uses SET LOCAL, which is transaction-scoped and
    automatically cleared when the transaction ends. This works correctly
    with connection poolers like PgBouncer.
    """
    await set_rls_user_context(db, current_admin.id)
    yield db


RlsSession = Annotated[AsyncSession, Depends(get_db_with_rls)]
