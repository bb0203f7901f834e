"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from app.config import IdentityMode, Settings


class TestSettings:
    """Tests for Settings validation."""

    def test_defaults(self):
        settings = Settings(database_url="sqlite:///:memory:", identity_mode="local_header")

        assert settings.identity_mode == IdentityMode.LOCAL_HEADER
        assert settings.local_user_header == "x-user-id"
        assert settings.allow_origin == "*"
        assert settings.jwt_algorithm == "HS256"

    def test_environment_normalized(self):
        settings = Settings(database_url="sqlite://", environment="PRODUCTION")
        assert settings.environment == "production"
        assert settings.is_production
        assert not settings.is_development

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(database_url="sqlite://", environment="qa")

    def test_log_level_normalized(self):
        assert Settings(database_url="sqlite://", log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(database_url="sqlite://", log_level="verbose")

    def test_claims_mode_requires_secret(self):
        with pytest.raises(ValidationError, match="jwt_secret"):
            Settings(database_url="sqlite://", identity_mode="claims", jwt_secret=None)

    def test_claims_mode_with_secret(self):
        settings = Settings(database_url="sqlite://", identity_mode="claims", jwt_secret="s")
        assert settings.identity_mode == IdentityMode.CLAIMS
