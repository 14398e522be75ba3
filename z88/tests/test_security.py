"""
Unit tests for JWT authentication, ownership checks and size limits.
"""

import time

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from z88.services.security import (
    ALLOWED_ORIGINS,
    AuthenticationError,
    check_story_ownership,
    decode_jwt,
    extract_user_id,
    get_allowed_origins,
    get_current_user,
    get_optional_user,
    validate_request_size,
)

SECRET = "super-secret-jwt-key-for-tests-0123456789"


def _request(authorization=None, query=b""):
    headers = []
    if authorization:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "query_string": query})


def _token(claims=None, secret=SECRET):
    payload = {"sub": "user-1", "aud": "authenticated", "iat": int(time.time()), "exp": int(time.time()) + 3600}
    payload.update(claims or {})
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setenv("SUPABASE_JWT_SECRET", SECRET)


@pytest.fixture
def dev_mode(monkeypatch):
    monkeypatch.delenv("SUPABASE_JWT_SECRET", raising=False)


class TestDecodeJWT:
    """Tests for decode_jwt."""

    def test_valid_token(self, jwt_secret):
        assert decode_jwt(_token())["sub"] == "user-1"

    def test_wrong_signature(self, jwt_secret):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_jwt(_token(secret="another-secret-that-is-long-enough-0000"))

    def test_expired(self, jwt_secret):
        with pytest.raises(AuthenticationError, match="expired"):
            decode_jwt(_token({"exp": int(time.time()) - 10}))

    def test_wrong_audience(self, jwt_secret):
        with pytest.raises(AuthenticationError):
            decode_jwt(_token({"aud": "anon"}))

    def test_dev_mode_skips_signature(self, dev_mode):
        token = _token(secret="whatever-secret-is-used-by-the-client-00")
        assert decode_jwt(token)["sub"] == "user-1"

    def test_dev_mode_rejects_garbage(self, dev_mode):
        with pytest.raises(AuthenticationError, match="Invalid token format"):
            decode_jwt("not-a-jwt")


class TestExtractUserId:
    def test_sub_claim(self):
        assert extract_user_id({"sub": "abc"}) == "abc"

    def test_missing_sub(self):
        with pytest.raises(AuthenticationError):
            extract_user_id({"email": "kira@neo.jp"})


class TestGetCurrentUser:
    """Tests for request authentication."""

    @pytest.mark.asyncio
    async def test_bearer_header(self, jwt_secret):
        user_id, payload = await get_current_user(_request(f"Bearer {_token()}"))

        assert user_id == "user-1"
        assert payload["aud"] == "authenticated"

    @pytest.mark.asyncio
    async def test_query_parameter(self, jwt_secret):
        user_id, _ = await get_current_user(_request(query=f"token={_token()}".encode()))

        assert user_id == "user-1"

    @pytest.mark.asyncio
    async def test_missing_token(self, jwt_secret):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request())

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_malformed_header(self, jwt_secret):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request("Token abc"))

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, jwt_secret):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request("Bearer nonsense"))

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_optional_user(self, jwt_secret):
        assert await get_optional_user(_request(f"Bearer {_token()}")) == "user-1"
        assert await get_optional_user(_request()) is None
        assert await get_optional_user(_request("Bearer nonsense")) is None


class TestOwnership:
    def test_owner(self):
        story = {"id": 1, "user_id": "user-1"}
        assert check_story_ownership(story, "user-1") is story

    def test_missing_story(self):
        with pytest.raises(HTTPException) as exc_info:
            check_story_ownership(None, "user-1")
        assert exc_info.value.status_code == 404

    def test_other_owner(self):
        with pytest.raises(HTTPException) as exc_info:
            check_story_ownership({"id": 1, "user_id": "user-2"}, "user-1")
        assert exc_info.value.status_code == 403


class TestRequestSize:
    def test_within_limits(self):
        validate_request_size(search_query="neon", tags=["noir"], variables={"secret": "a chip"})

    @pytest.mark.parametrize("kwargs", [
        {"search_query": "q" * 201},
        {"tags": ["ok", "t" * 51]},
        {"variables": {"secret": "v" * 301}},
    ])
    def test_too_large(self, kwargs):
        with pytest.raises(HTTPException) as exc_info:
            validate_request_size(**kwargs)
        assert exc_info.value.status_code == 413


class TestOrigins:
    def test_extra_origins(self, monkeypatch):
        monkeypatch.setenv("Z88_ALLOWED_ORIGINS", "https://z88.example.com, http://localhost:3000,")

        origins = get_allowed_origins()

        assert origins[:len(ALLOWED_ORIGINS)] == ALLOWED_ORIGINS
        assert origins.count("http://localhost:3000") == 1
        assert origins[-1] == "https://z88.example.com"
