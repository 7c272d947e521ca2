"""Tests for portal bearer JWT authentication."""

import time
from unittest.mock import MagicMock, patch

import jwt as pyjwt
import pytest
import structlog
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from leadflow.core.auth import PortalUser, decode_portal_jwt, require_auth

pytestmark = pytest.mark.unit

_TEST_SECRET = "portal-test-secret-with-at-least-32-bytes"


def _sign_jwt(payload: dict, secret: str = _TEST_SECRET) -> str:
    """Sign a JWT with the test HMAC secret."""
    return pyjwt.encode(payload, secret, algorithm="HS256")


def _mock_settings(secret: str = _TEST_SECRET, audience: str = ""):
    """Return a mock Settings with test-friendly defaults."""
    s = MagicMock()
    s.auth_jwt_secret = secret
    s.auth_jwt_algorithm = "HS256"
    s.auth_jwt_audience = audience
    return s


def _claims(**overrides) -> dict:
    now = int(time.time())
    claims = {"sub": "user_abc", "iat": now - 10, "exp": now + 300}
    claims.update(overrides)
    return claims


class TestPortalUser:
    def test_portal_user_fields(self):
        user = PortalUser(user_id="user_abc", claims={"sub": "user_abc"})
        assert user.user_id == "user_abc"
        assert user.claims["sub"] == "user_abc"


class TestDecodePortalJwt:
    def test_valid_token(self):
        token = _sign_jwt(_claims(email="ada@example.com"))

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
            user = decode_portal_jwt(token)

        assert user.user_id == "user_abc"
        assert user.claims["email"] == "ada@example.com"

    def test_expired_token_raises(self):
        now = int(time.time())
        token = _sign_jwt(_claims(iat=now - 600, exp=now - 300))

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
            with pytest.raises(HTTPException) as exc_info:
                decode_portal_jwt(token)
            assert exc_info.value.status_code == 401
            assert "expired" in exc_info.value.detail.lower()

    def test_wrong_secret_raises(self):
        token = _sign_jwt(_claims(), secret="another-secret-that-is-also-32-bytes-long")

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
            with pytest.raises(HTTPException) as exc_info:
                decode_portal_jwt(token)
            assert exc_info.value.status_code == 401
            assert "invalid token" in exc_info.value.detail.lower()

    def test_missing_sub_raises(self):
        claims = _claims()
        del claims["sub"]
        token = _sign_jwt(claims)

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
            with pytest.raises(HTTPException) as exc_info:
                decode_portal_jwt(token)
            assert exc_info.value.status_code == 401
            assert "sub" in exc_info.value.detail.lower()

    def test_audience_enforced_when_configured(self):
        token = _sign_jwt(_claims(aud="someone-else"))

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings(audience="leadflow-portal")):
            with pytest.raises(HTTPException) as exc_info:
                decode_portal_jwt(token)
            assert exc_info.value.status_code == 401
            assert "aud" in exc_info.value.detail.lower()

    def test_matching_audience_accepted(self):
        token = _sign_jwt(_claims(aud="leadflow-portal"))

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings(audience="leadflow-portal")):
            assert decode_portal_jwt(token).user_id == "user_abc"

    def test_missing_secret_is_server_error(self):
        token = _sign_jwt(_claims())

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings(secret="")):
            with pytest.raises(HTTPException) as exc_info:
                decode_portal_jwt(token)
            assert exc_info.value.status_code == 500


class TestRequireAuth:
    @pytest.mark.asyncio
    async def test_valid_bearer_token(self):
        token = _sign_jwt(_claims())
        request = MagicMock()
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
            user = await require_auth(request, credentials)

        assert user.user_id == "user_abc"
        assert request.state.user_id == "user_abc"

    @pytest.mark.asyncio
    async def test_missing_credentials_raises(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_auth(MagicMock(), None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_binds_user_to_log_context(self):
        token = _sign_jwt(_claims())
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
        structlog.contextvars.clear_contextvars()

        try:
            with patch("leadflow.core.auth.get_settings", return_value=_mock_settings()):
                await require_auth(MagicMock(), credentials)

            assert structlog.contextvars.get_contextvars()["portal_user_id"] == "user_abc"
        finally:
            structlog.contextvars.clear_contextvars()
