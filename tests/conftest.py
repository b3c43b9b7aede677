"""Test configuration and fixtures for the quote engine.

Provides settings isolation, the seeded rate table, request factories and a
fully wired quote service with a controllable clock.
"""

import os
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest

from quote_engine.core.config import Settings, clear_settings_cache
from quote_engine.models.quote import BusinessType, QuoteRequest
from quote_engine.models.rating import ProductType
from quote_engine.models.risk import RiskFactor, RiskFactorType
from quote_engine.services.performance_monitor import performance_tracker
from quote_engine.services.quote_repository import InMemoryQuoteRepository
from quote_engine.services.quote_service import QuoteService
from quote_engine.services.rating import (
    InMemoryRateTable,
    RateResolver,
    build_default_rate_table,
)

FIXED_NOW = datetime(2025, 3, 14, 15, 0, tzinfo=UTC)

# California clerical office, workers' comp: $300k payroll at 2.50 per $1,000
VALID_QUOTE_DATA: dict[str, Any] = {
    "business_name": "Acme Software LLC",
    "tax_id": "12-3456789",
    "business_type": BusinessType.TECHNOLOGY,
    "state_code": "CA",
    "classification_code": "8810",
    "product_type": ProductType.WORKERS_COMPENSATION,
    "annual_payroll": Decimal("300000"),
    "annual_revenue": Decimal("2000000"),
    "employee_count": 10,
    "years_in_business": 3,
    "coverage_limit": Decimal("1000000"),
    "deductible": Decimal("500"),
}


class SteppingClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Each test sees fresh settings built from a clean environment."""
    for key in list(os.environ):
        if key.startswith("QUOTE_ENGINE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    performance_tracker.reset_stats()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Default application settings."""
    return Settings()


@pytest.fixture
def rate_table() -> InMemoryRateTable:
    """Rate table loaded with the standard seed data."""
    return build_default_rate_table()


@pytest.fixture
def resolver(rate_table: InMemoryRateTable) -> RateResolver:
    """Resolver over the seeded rate table."""
    return RateResolver(rate_table)


@pytest.fixture
def make_quote_request() -> Callable[..., QuoteRequest]:
    """Factory for quote requests; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> QuoteRequest:
        data = dict(VALID_QUOTE_DATA)
        data.update(overrides)
        return QuoteRequest(**data)

    return _make


@pytest.fixture
def make_risk_factor() -> Callable[..., RiskFactor]:
    """Factory for risk factors."""

    def _make(
        factor_type: RiskFactorType, value: str | int, name: str | None = None
    ) -> RiskFactor:
        return RiskFactor(
            factor_code=factor_type.value.upper()[:20],
            factor_name=name or f"{factor_type.value} factor",
            factor_value=Decimal(str(value)),
            factor_type=factor_type,
        )

    return _make


@pytest.fixture
def quote_repository() -> InMemoryQuoteRepository:
    """Empty quote store."""
    return InMemoryQuoteRepository()


@pytest.fixture
def clock() -> SteppingClock:
    """Deterministic clock starting at FIXED_NOW."""
    return SteppingClock()


@pytest.fixture
def quote_service(
    resolver: RateResolver,
    quote_repository: InMemoryQuoteRepository,
    settings: Settings,
    clock: SteppingClock,
) -> QuoteService:
    """Quote service wired to the seeded rate table and an empty store."""
    return QuoteService(
        rate_resolver=resolver,
        quote_repository=quote_repository,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def fixed_now() -> datetime:
    """First instant returned by the ``clock`` fixture."""
    return FIXED_NOW
