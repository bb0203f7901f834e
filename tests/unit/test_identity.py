"""Unit tests for caller identity resolution."""

import time

import pytest
from unittest.mock import Mock, patch
from fastapi import HTTPException, Request

from app.middleware.identity import (
    CallerIdentityResolver,
    get_optional_caller_id,
    require_caller_id,
)


def make_request(resolver, headers=None):
    """Mock FastAPI request carrying a resolver on its app state."""
    request = Mock(spec=Request)
    request.headers = headers or {}
    request.app = Mock()
    request.app.state.identity_resolver = resolver
    return request


class TestLocalHeaderMode:
    """Tests for the local_header identity mode."""

    @pytest.fixture
    def resolver(self, settings):
        return CallerIdentityResolver(settings)

    def test_reads_header(self, resolver):
        request = make_request(resolver, {"x-user-id": "user-1"})
        assert resolver.resolve(request) == "user-1"

    def test_missing_header_is_anonymous(self, resolver):
        assert resolver.resolve(make_request(resolver)) is None

    def test_empty_header_is_anonymous(self, resolver):
        assert resolver.resolve(make_request(resolver, {"x-user-id": ""})) is None

    def test_default_caller(self, resolver):
        assert resolver.default_caller_id() == "localstack-test-user-id"

    @pytest.mark.asyncio
    async def test_require_falls_back_to_default(self, resolver):
        caller_id = await require_caller_id(make_request(resolver))
        assert caller_id == "localstack-test-user-id"

    @pytest.mark.asyncio
    async def test_optional_has_no_fallback(self, resolver):
        assert await get_optional_caller_id(make_request(resolver)) is None


class TestClaimsMode:
    """Tests for the claims identity mode."""

    @pytest.fixture
    def resolver(self, claims_settings):
        return CallerIdentityResolver(claims_settings)

    def test_valid_token(self, resolver, make_token):
        request = make_request(resolver, {"authorization": f"Bearer {make_token('user-9')}"})
        assert resolver.resolve(request) == "user-9"

    def test_header_ignored(self, resolver):
        """Test that the local header does not grant an identity in claims mode."""
        request = make_request(resolver, {"x-user-id": "user-1"})
        assert resolver.resolve(request) is None

    def test_wrong_secret(self, resolver, make_token):
        token = make_token("user-9", secret="another-secret")
        request = make_request(resolver, {"authorization": f"Bearer {token}"})

        with patch("app.middleware.identity.logger") as mock_logger:
            assert resolver.resolve(request) is None
            mock_logger.warning.assert_called_once()

        # The token must never be written to the log
        assert token not in str(mock_logger.warning.call_args)

    def test_expired_token(self, resolver, make_token):
        token = make_token("user-9", exp=int(time.time()) - 60)
        request = make_request(resolver, {"authorization": f"Bearer {token}"})
        assert resolver.resolve(request) is None

    def test_token_without_subject(self, resolver, make_token):
        token = make_token("")
        request = make_request(resolver, {"authorization": f"Bearer {token}"})
        assert resolver.resolve(request) is None

    def test_non_bearer_scheme(self, resolver):
        request = make_request(resolver, {"authorization": "Basic dXNlcjpwYXNz"})
        assert resolver.resolve(request) is None

    def test_audience_checked_when_configured(self, claims_settings, make_token):
        claims_settings.jwt_audience = "surveys"
        resolver = CallerIdentityResolver(claims_settings)

        good = make_request(resolver, {"authorization": f"Bearer {make_token('u', aud='surveys')}"})
        bad = make_request(resolver, {"authorization": f"Bearer {make_token('u', aud='other')}"})

        assert resolver.resolve(good) == "u"
        assert resolver.resolve(bad) is None

    def test_no_default_caller(self, resolver):
        assert resolver.default_caller_id() is None

    @pytest.mark.asyncio
    async def test_require_rejects_anonymous(self, resolver):
        with pytest.raises(HTTPException) as exc_info:
            await require_caller_id(make_request(resolver))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Unauthorized"

    @pytest.mark.asyncio
    async def test_require_accepts_token(self, resolver, make_token):
        request = make_request(resolver, {"authorization": f"Bearer {make_token('user-9')}"})
        assert await require_caller_id(request) == "user-9"
