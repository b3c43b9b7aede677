# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies for the rating services.

Services are built once during application startup and stored on
``app.state``; these helpers hand them to the endpoints.
"""

from beartype import beartype
from fastapi import Request

from ..core.config import Settings, get_settings
from ..services.quote_repository import InMemoryQuoteRepository, QuoteRepository
from ..services.quote_service import QuoteService
from ..services.rating import (
    EligibilityEvaluator,
    InMemoryRateTable,
    PremiumCalculator,
    RateResolver,
    RiskAssessor,
    build_default_rate_table,
)


@beartype
def build_quote_service(
    settings: Settings,
    rate_table: InMemoryRateTable,
    repository: QuoteRepository,
) -> QuoteService:
    """Wire the rating pipeline around a rate table and a quote store."""
    return QuoteService(
        rate_resolver=RateResolver(rate_table),
        quote_repository=repository,
        risk_assessor=RiskAssessor(),
        premium_calculator=PremiumCalculator(settings.policy_fees),
        eligibility_evaluator=EligibilityEvaluator(),
        settings=settings,
    )


@beartype
def init_app_state(state: object, settings: Settings) -> None:
    """Populate application state with the shared services."""
    rate_table = (
        build_default_rate_table() if settings.seed_rate_tables else InMemoryRateTable()
    )
    repository = InMemoryQuoteRepository()
    state.rate_table = rate_table  # type: ignore[attr-defined]
    state.quote_repository = repository  # type: ignore[attr-defined]
    state.quote_service = build_quote_service(  # type: ignore[attr-defined]
        settings, rate_table, repository
    )


@beartype
def get_app_settings() -> Settings:
    """Provide application settings."""
    return get_settings()


@beartype
def get_rate_table(request: Request) -> InMemoryRateTable:
    """Provide the loaded rate table."""
    rate_table: InMemoryRateTable = request.app.state.rate_table
    return rate_table


@beartype
def get_rate_resolver(request: Request) -> RateResolver:
    """Provide a resolver over the loaded rate table."""
    return RateResolver(get_rate_table(request))


@beartype
def get_quote_service(request: Request) -> QuoteService:
    """Provide Quote service instance."""
    quote_service: QuoteService = request.app.state.quote_service
    return quote_service


@beartype
def get_quote_repository(request: Request) -> InMemoryQuoteRepository:
    """Provide the quote store."""
    repository: InMemoryQuoteRepository = request.app.state.quote_repository
    return repository
