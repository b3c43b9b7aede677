"""Unit tests for settings management."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from quote_engine.core.config import Settings, clear_settings_cache, get_settings
from quote_engine.models.rating import ProductType


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, settings):
        """Test default quoting parameters."""
        assert settings.quote_validity_days == 30
        assert settings.policy_term_years == 1
        assert settings.api_version == "1.0"
        assert settings.policy_fees[ProductType.WORKERS_COMPENSATION] == Decimal("250.00")
        assert settings.policy_fees[ProductType.CYBER_LIABILITY] == Decimal("125.00")
        assert settings.is_development
        assert not settings.is_production

    def test_environment_override(self, monkeypatch):
        """Test that QUOTE_ENGINE_ variables override defaults."""
        monkeypatch.setenv("QUOTE_ENGINE_QUOTE_VALIDITY_DAYS", "45")
        monkeypatch.setenv("QUOTE_ENGINE_API_ENV", "production")
        monkeypatch.setenv("QUOTE_ENGINE_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.quote_validity_days == 45
        assert settings.is_production
        assert settings.log_level == "DEBUG"

    def test_invalid_environment_rejected(self):
        """Test that unknown environments are rejected."""
        with pytest.raises(ValidationError):
            Settings(api_env="qa")

    def test_negative_fee_rejected(self):
        """Test that policy fees cannot be negative."""
        fees = {p: Decimal("100") for p in ProductType}
        fees[ProductType.GENERAL_LIABILITY] = Decimal("-1")

        with pytest.raises(ValidationError, match="cannot be negative"):
            Settings(policy_fees=fees)

    def test_fee_schedule_must_be_complete(self):
        """Test that every product needs a fee."""
        with pytest.raises(ValidationError, match="Policy fee missing"):
            Settings(policy_fees={ProductType.GENERAL_LIABILITY: Decimal("100")})

    def test_settings_frozen(self, settings):
        """Test that settings are immutable."""
        with pytest.raises(ValidationError):
            settings.quote_validity_days = 10

    def test_get_settings_cached(self, monkeypatch):
        """Test caching and cache reset."""
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("QUOTE_ENGINE_POLICY_TERM_YEARS", "2")
        clear_settings_cache()

        assert get_settings().policy_term_years == 2
