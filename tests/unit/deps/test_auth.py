"""Unit tests for auth dependencies — JWT validation and admin lookup."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from app.api.deps.admin import require_super_admin
from app.api.deps.auth import get_current_admin, get_signing_key

from tests.helpers.mock_factories import (
    make_mock_admin,
    make_mock_db,
    make_mock_super_admin,
)

# ---------------------------------------------------------------------------
# get_signing_key
# ---------------------------------------------------------------------------


class TestGetSigningKey:
    """Tests for JWKS key matching by kid."""

    def test_returns_key_when_kid_matches(self):
        jwks = {
            "keys": [
                {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "a", "y": "b"},
                {"kid": "key-2", "kty": "EC", "crv": "P-256", "x": "c", "y": "d"},
            ]
        }

        with patch("app.api.deps.auth.jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"kid": "key-2"}

            with patch("app.api.deps.auth.ECKey") as mock_eckey:
                expected_key = MagicMock()
                mock_eckey.return_value = expected_key
                assert get_signing_key(jwks, "dummy") == expected_key

    def test_raises_when_no_matching_kid(self):
        jwks = {"keys": [{"kid": "key-1", "kty": "EC", "crv": "P-256"}]}

        with patch("app.api.deps.auth.jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"kid": "missing-kid"}

            with pytest.raises(ValueError, match="Unable to find matching key"):
                get_signing_key(jwks, "dummy")


# ---------------------------------------------------------------------------
# get_current_admin
# ---------------------------------------------------------------------------


class TestGetCurrentAdmin:
    """Tests for JWT-based admin authentication."""

    def setup_method(self):
        self.db = make_mock_db()
        self.credentials = MagicMock(credentials="token")

    @pytest.mark.asyncio
    async def test_raises_401_when_no_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_admin(credentials=None, db=self.db)
        assert exc_info.value.status_code == 401
        assert "Not authenticated" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_returns_active_admin(self):
        admin = make_mock_admin()

        with (
            patch("app.api.deps.auth.verify_token", AsyncMock(return_value=admin.id)),
            patch("app.api.deps.auth.admin_ops.get", AsyncMock(return_value=admin)),
        ):
            result = await get_current_admin(credentials=self.credentials, db=self.db)

        assert result is admin

    @pytest.mark.asyncio
    async def test_signed_in_user_without_admin_row_gets_403(self):
        with (
            patch("app.api.deps.auth.verify_token", AsyncMock(return_value=uuid.uuid4())),
            patch("app.api.deps.auth.admin_ops.get", AsyncMock(return_value=None)),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_admin(credentials=self.credentials, db=self.db)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_suspended_admin_gets_403(self):
        admin = make_mock_admin(status="suspended")

        with (
            patch("app.api.deps.auth.verify_token", AsyncMock(return_value=admin.id)),
            patch("app.api.deps.auth.admin_ops.get", AsyncMock(return_value=admin)),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_admin(credentials=self.credentials, db=self.db)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_token_gets_401(self):
        from jose import JWTError

        with (
            patch("app.api.deps.auth.get_jwks", AsyncMock(return_value={"keys": []})),
            patch("app.api.deps.auth._subject", side_effect=JWTError("bad signature")),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_admin(credentials=self.credentials, db=self.db)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_retries_once_with_fresh_jwks(self):
        admin = make_mock_admin()
        get_jwks = AsyncMock(return_value={"keys": []})

        with (
            patch("app.api.deps.auth.get_jwks", get_jwks),
            patch("app.api.deps.auth._subject", side_effect=[ValueError("stale"), admin.id]),
            patch("app.api.deps.auth.admin_ops.get", AsyncMock(return_value=admin)),
        ):
            result = await get_current_admin(credentials=self.credentials, db=self.db)

        assert result is admin
        assert get_jwks.await_args_list[-1].kwargs == {"force_refresh": True}


class TestRequireSuperAdmin:
    @pytest.mark.asyncio
    async def test_admin_is_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_super_admin(current_admin=make_mock_admin())
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_super_admin_passes(self):
        super_admin = make_mock_super_admin()
        assert await require_super_admin(current_admin=super_admin) is super_admin
