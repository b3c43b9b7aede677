# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from decimal import Decimal

from beartype import beartype
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.rating import ProductType


def _default_policy_fees() -> dict[ProductType, Decimal]:
    return {
        ProductType.WORKERS_COMPENSATION: Decimal("250.00"),
        ProductType.GENERAL_LIABILITY: Decimal("150.00"),
        ProductType.BUSINESS_OWNERS_POLICY: Decimal("200.00"),
        ProductType.COMMERCIAL_AUTO: Decimal("175.00"),
        ProductType.PROFESSIONAL_LIABILITY: Decimal("200.00"),
        ProductType.CYBER_LIABILITY: Decimal("125.00"),
    }


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUOTE_ENGINE_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # API Configuration
    app_name: str = Field(
        default="Commercial Quote Engine",
        description="Application name",
        min_length=1,
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    api_version: str = Field(
        default="1.0",
        description="Version string echoed on every quote response",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    # Quoting
    quote_validity_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days a quote remains valid after issue",
    )
    policy_term_years: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Policy term measured from the effective date",
    )
    quote_number_max_attempts: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Attempts to draw an unused quote number before failing",
    )
    policy_fees: dict[ProductType, Decimal] = Field(
        default_factory=_default_policy_fees,
        description="Flat administrative fee per product, added after tax",
    )

    # Reference data
    seed_rate_tables: bool = Field(
        default=True,
        description="Load the built-in rate table on startup",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls: type["Settings"], v: object) -> object:
        """Accept lower-case level names from the environment."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("policy_fees")
    @classmethod
    def validate_policy_fees(
        cls: type["Settings"], v: dict[ProductType, Decimal]
    ) -> dict[ProductType, Decimal]:
        """Every product must carry a non-negative fee."""
        missing = [p.value for p in ProductType if p not in v]
        if missing:
            raise ValueError(f"Policy fee missing for: {', '.join(missing)}")
        for product, fee in v.items():
            if fee < 0:
                raise ValueError(f"Policy fee for {product.value} cannot be negative")
        return v

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
