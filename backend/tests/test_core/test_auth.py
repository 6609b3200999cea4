"""
Unit tests for session token validation and role guards
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from apparel.core import auth
from apparel.core.auth import (
    TokenUser,
    decode_session_token,
    extract_role,
    get_current_user,
    get_current_user_optional,
    require_admin,
    require_shipper_or_admin,
)

SECRET = "test-signing-secret"


@pytest.fixture(autouse=True)
def hs256_settings(monkeypatch):
    monkeypatch.setattr(auth.settings, "AUTH_JWT_KEY", SECRET)
    monkeypatch.setattr(auth.settings, "AUTH_JWT_ALGORITHM", "HS256")


def make_token(expires_in=timedelta(minutes=5), **claims):
    payload = {"exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, SECRET, algorithm="HS256")


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestExtractRole:

    def test_role_from_metadata_claim(self):
        assert extract_role({"metadata": {"role": "admin"}}) == "admin"

    def test_role_from_public_metadata(self):
        assert extract_role({"public_metadata": {"role": "shipper"}}) == "shipper"

    def test_top_level_role_claim(self):
        assert extract_role({"role": "designer"}) == "designer"

    def test_defaults_to_customer(self):
        assert extract_role({"metadata": {}}) == "customer"


class TestDecodeSessionToken:

    def test_valid_token(self):
        payload = decode_session_token(make_token(sub="user_1", email="a@example.com"))
        assert payload["sub"] == "user_1"

    def test_expired_token(self):
        token = make_token(expires_in=timedelta(minutes=-5), sub="user_1")

        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "user_1"}, "another-secret", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail.startswith("Invalid token")

    def test_missing_key_configuration(self, monkeypatch):
        monkeypatch.setattr(auth.settings, "AUTH_JWT_KEY", "")

        with pytest.raises(HTTPException) as exc_info:
            decode_session_token("anything")

        assert exc_info.value.status_code == 401


class TestCurrentUser:

    def test_user_built_from_claims(self):
        token = make_token(sub="user_1", email="a@example.com", name="Ann", metadata={"role": "admin"})

        user = asyncio.run(get_current_user(bearer(token)))

        assert user.id == "user_1"
        assert user.email == "a@example.com"
        assert user.is_admin

    def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(None))
        assert exc_info.value.status_code == 401

    def test_missing_subject(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(bearer(make_token(email="a@example.com"))))
        assert "missing user id" in exc_info.value.detail

    def test_optional_user_ignores_bad_tokens(self):
        assert asyncio.run(get_current_user_optional(bearer("not-a-jwt"))) is None
        assert asyncio.run(get_current_user_optional(None)) is None


class TestRoleGuards:

    def test_admin_passes(self):
        user = TokenUser(id="u", role="admin")
        assert asyncio.run(require_admin(user)) is user

    def test_customer_rejected_with_403(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(require_admin(TokenUser(id="u", role="customer")))

        assert exc_info.value.status_code == 403
        assert "your role: customer" in exc_info.value.detail

    def test_shipper_or_admin(self):
        assert asyncio.run(require_shipper_or_admin(TokenUser(id="u", role="shipper"))).role == "shipper"
        with pytest.raises(HTTPException):
            asyncio.run(require_shipper_or_admin(TokenUser(id="u", role="designer")))
