# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote generation and retrieval service."""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.quote import (
    EligibilityResult,
    PremiumEstimateRequest,
    PremiumEstimateResponse,
    QuoteRequest,
    QuoteResponse,
    QuoteStatus,
)
from ..models.rating import DEFAULT_CODE, RateTableEntry
from .performance_monitor import performance_monitor
from .quote_repository import QuoteRepository
from .rating.calculators import PremiumCalculator
from .rating.eligibility import EligibilityEvaluator
from .rating.rate_resolver import RateResolver
from .rating.risk_assessor import RiskAssessor

logger = get_logger(__name__)

NO_RATE_MESSAGE = "No rate available for the requested coverage"
ESTIMATE_NOTE = "This is an estimate. Final premium may vary based on full underwriting."


class QuoteNumberExhaustedError(RuntimeError):
    """No unused quote number could be drawn within the attempt budget."""


@beartype
def generate_quote_number(now: datetime) -> str:
    """Build a quote number in the QT-YYYYMMDD-XXXXXXXX format."""
    return f"QT-{now:%Y%m%d}-{uuid4().hex[:8].upper()}"


@beartype
def add_years(start: date, years: int) -> date:
    """Shift a date by whole years; Feb 29 lands on Feb 28 in common years."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class QuoteService:
    """Orchestrate rating for a quote request.

    Sequence: resolve rate, assess risk, calculate premium, evaluate
    eligibility, assign a quote number and validity window, persist. The
    service itself is the only component with side effects.
    """

    def __init__(
        self,
        rate_resolver: RateResolver,
        quote_repository: QuoteRepository,
        risk_assessor: RiskAssessor | None = None,
        premium_calculator: PremiumCalculator | None = None,
        eligibility_evaluator: EligibilityEvaluator | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize quote service with its collaborators."""
        self._settings = settings or get_settings()
        self._rate_resolver = rate_resolver
        self._quote_repository = quote_repository
        self._risk_assessor = risk_assessor or RiskAssessor()
        self._premium_calculator = premium_calculator or PremiumCalculator(
            self._settings.policy_fees
        )
        self._eligibility_evaluator = eligibility_evaluator or EligibilityEvaluator()
        self._clock = clock or _utc_now

    @performance_monitor("quote_creation", max_duration_ms=50)
    async def create_quote(self, request: QuoteRequest) -> QuoteResponse:
        """Generate, persist and return a quote.

        Ineligible requests are still priced and stored with a ``Declined``
        status so the caller can see the declined price and the reasons.
        """
        start_time = time.perf_counter()
        logger.info(
            "Processing quote request for %s, Product: %s",
            request.business_name,
            request.product_type.value,
        )

        try:
            now = self._clock()
            effective_date = request.effective_date or (now.date() + timedelta(days=1))

            rate_entry = await self._rate_resolver.resolve(
                request.state_code,
                request.classification_code,
                request.product_type,
                as_of=effective_date,
            )
            risk_assessment = self._risk_assessor.assess(request.risk_factors or [])
            premium = self._premium_calculator.calculate(
                request, risk_assessment, rate_entry
            )
            eligibility = self._eligibility_evaluator.evaluate(request, risk_assessment)
            eligibility = self._apply_rate_availability(eligibility, rate_entry)

            if not eligibility.is_eligible:
                status = QuoteStatus.DECLINED
            elif eligibility.warnings:
                status = QuoteStatus.REFERRED
            else:
                status = QuoteStatus.QUOTED

            def build(quote_number: str) -> QuoteResponse:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                return QuoteResponse(
                    quote_number=quote_number,
                    quote_date=now,
                    expiration_date=now
                    + timedelta(days=self._settings.quote_validity_days),
                    status=status,
                    business_name=request.business_name,
                    tax_id=request.tax_id,
                    business_type=request.business_type,
                    product_type=request.product_type,
                    state_code=request.state_code,
                    classification_code=request.classification_code,
                    coverage_limit=request.coverage_limit,
                    deductible=request.deductible,
                    effective_date=effective_date,
                    policy_expiration_date=add_years(
                        effective_date, self._settings.policy_term_years
                    ),
                    premium=premium,
                    risk_assessment=risk_assessment,
                    is_eligible=eligibility.is_eligible,
                    eligibility_messages=eligibility.all_messages(),
                    processing_time_ms=f"{elapsed_ms}ms",
                    api_version=self._settings.api_version,
                )

            response = await self._store_with_unique_number(build, now, request.tax_id)

        except asyncio.CancelledError:
            logger.warning("Quote calculation was cancelled")
            raise
        except Exception:
            logger.exception("Error calculating quote for %s", request.business_name)
            raise

        if response.status == QuoteStatus.DECLINED:
            logger.warning(
                "Business %s not eligible: %s",
                request.business_name,
                ", ".join(response.eligibility_messages),
            )
        logger.info(
            "Quote %s generated. Status: %s, Premium: %s, Processing time: %s",
            response.quote_number,
            response.status.value,
            response.premium.annual_premium,
            response.processing_time_ms,
        )
        return response

    @performance_monitor("premium_estimate", max_duration_ms=20)
    async def estimate_premium(
        self, request: PremiumEstimateRequest
    ) -> PremiumEstimateResponse:
        """Preview a premium using neutral risk; nothing is persisted."""
        logger.info(
            "Premium estimate requested for Product: %s, State: %s",
            request.product_type.value,
            request.state_code,
        )
        rate_entry = await self._rate_resolver.resolve(
            request.state_code,
            request.classification_code or DEFAULT_CODE,
            request.product_type,
        )
        # Synthetic rates price to an all-zero breakdown
        premium = self._premium_calculator.calculate(
            request.to_quote_request(), RiskAssessor.neutral(), rate_entry
        )
        return PremiumEstimateResponse(
            estimated_annual_premium=premium.annual_premium,
            estimated_monthly_premium=premium.monthly_premium,
            base_premium=premium.base_premium,
            minimum_premium=premium.minimum_premium,
            state_tax_rate=rate_entry.state_tax_rate,
            note=f"{NO_RATE_MESSAGE}." if rate_entry.is_synthetic else ESTIMATE_NOTE,
            premium=premium,
        )

    @beartype
    async def get_quote(self, quote_number: str) -> Result[QuoteResponse, str]:
        """Retrieve a stored quote exactly as it was issued."""
        quote = await self._quote_repository.get(quote_number.strip().upper())
        if quote is None:
            return Err(f"Quote {quote_number} not found")
        return Ok(quote)

    @beartype
    async def get_quote_history(self, tax_id: str) -> list[QuoteResponse]:
        """All quotes issued to a business, newest first."""
        return await self._quote_repository.history(tax_id)

    @staticmethod
    def _apply_rate_availability(
        eligibility: EligibilityResult, rate_entry: RateTableEntry
    ) -> EligibilityResult:
        if not rate_entry.is_synthetic:
            return eligibility
        return EligibilityResult(
            is_eligible=False,
            messages=[*eligibility.messages, NO_RATE_MESSAGE],
            warnings=eligibility.warnings,
            referral_reason=eligibility.referral_reason,
        )

    async def _store_with_unique_number(
        self,
        build: Callable[[str], QuoteResponse],
        now: datetime,
        tax_id: str,
    ) -> QuoteResponse:
        """Draw quote numbers until one is unused, then persist the quote."""
        for _ in range(self._settings.quote_number_max_attempts):
            quote_number = generate_quote_number(now)
            if await self._quote_repository.exists(quote_number):
                logger.warning("Quote number collision on %s, regenerating", quote_number)
                continue
            response = build(quote_number)
            stored = await self._quote_repository.put(response, tax_id)
            if stored.is_ok():
                return response
            logger.warning("Quote number %s taken during write", quote_number)
        raise QuoteNumberExhaustedError(
            f"No unused quote number after {self._settings.quote_number_max_attempts} attempts"
        )
