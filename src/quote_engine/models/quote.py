# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote domain models.

Field constraints on the request models are the caller-facing validation
layer: anything that reaches the rating services has already passed them.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Final

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig
from .premium import PremiumBreakdown
from .rating import DEFAULT_CODE, ProductType
from .risk import RiskAssessment, RiskFactor

QUOTE_NUMBER_PATTERN: Final = r"^QT-\d{8}-[0-9A-F]{8}$"
_QUOTE_NUMBER_RE: Final = re.compile(QUOTE_NUMBER_PATTERN)


class BusinessType(str, Enum):
    """Industry segment of the insured business."""

    RETAIL = "Retail"
    RESTAURANT = "Restaurant"
    OFFICE = "Office"
    MANUFACTURING = "Manufacturing"
    CONSTRUCTION = "Construction"
    TECHNOLOGY = "Technology"
    HEALTHCARE = "Healthcare"
    TRANSPORTATION = "Transportation"
    REAL_ESTATE = "RealEstate"
    PROFESSIONAL_SERVICES = "ProfessionalServices"


class QuoteStatus(str, Enum):
    """Quote lifecycle states."""

    DRAFT = "Draft"
    QUOTED = "Quoted"
    REFERRED = "Referred"
    DECLINED = "Declined"
    EXPIRED = "Expired"
    BOUND = "Bound"


@beartype
def is_valid_quote_number(value: str) -> bool:
    """Check a string against the QT-YYYYMMDD-XXXXXXXX format."""
    return _QUOTE_NUMBER_RE.match(value) is not None


@beartype
class QuoteRequest(BaseModelConfig):
    """Business profile and coverage selection to be quoted."""

    business_name: str = Field(..., min_length=2, max_length=200)
    tax_id: str = Field(
        ...,
        pattern=r"^\d{2}-\d{7}$",
        description="Federal employer identification number, XX-XXXXXXX",
    )
    business_type: BusinessType = Field(...)
    state_code: str = Field(..., min_length=2, max_length=2)
    classification_code: str = Field(..., min_length=1, max_length=10)
    product_type: ProductType = Field(...)

    annual_payroll: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("100000000"),
        decimal_places=2,
    )
    annual_revenue: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("50000000"),
        decimal_places=2,
    )
    employee_count: int = Field(default=1, ge=0, le=10000)
    years_in_business: int = Field(default=1, ge=0, le=50)
    vehicle_count: int | None = Field(
        None, ge=1, le=500, description="Scheduled vehicles for commercial auto"
    )

    coverage_limit: Decimal = Field(
        default=Decimal("1000000"),
        ge=Decimal("100000"),
        le=Decimal("5000000"),
    )
    deductible: Decimal = Field(
        default=Decimal("1000"),
        ge=Decimal("500"),
        le=Decimal("50000"),
    )

    risk_factors: list[RiskFactor] | None = Field(None)
    contact_email: str | None = Field(
        None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=254
    )
    effective_date: date | None = Field(None)

    @field_validator("state_code", "classification_code")
    @classmethod
    def uppercase_codes(cls, v: str) -> str:
        """Normalize codes so lookups are case-insensitive."""
        return v.upper()


@beartype
class EligibilityResult(BaseModelConfig):
    """Underwriting decision with the complete rationale."""

    is_eligible: bool = Field(...)
    messages: list[str] = Field(
        default_factory=list, description="Reasons the risk was declined"
    )
    warnings: list[str] = Field(
        default_factory=list, description="Referral reasons; do not decline"
    )
    referral_reason: str | None = Field(None)

    @property
    def requires_referral(self) -> bool:
        """True when the risk is acceptable but needs an underwriter."""
        return self.is_eligible and bool(self.warnings)

    @beartype
    def all_messages(self) -> list[str]:
        """Decline reasons followed by referral warnings."""
        return [*self.messages, *self.warnings]

    @model_validator(mode="after")
    def validate_consistency(self) -> "EligibilityResult":
        """An ineligible result must explain itself."""
        if not self.is_eligible and not self.messages:
            raise ValueError("Ineligible result requires at least one message")
        if self.is_eligible and self.messages:
            raise ValueError("Eligible result cannot carry decline messages")
        return self


@beartype
class QuoteResponse(BaseModelConfig):
    """Issued quote. Created once and never mutated."""

    quote_number: str = Field(..., pattern=QUOTE_NUMBER_PATTERN)
    quote_date: datetime = Field(...)
    expiration_date: datetime = Field(...)
    status: QuoteStatus = Field(...)

    business_name: str = Field(...)
    tax_id: str = Field(...)
    business_type: BusinessType = Field(...)
    product_type: ProductType = Field(...)
    state_code: str = Field(...)
    classification_code: str = Field(...)

    coverage_limit: Decimal = Field(...)
    deductible: Decimal = Field(...)
    effective_date: date = Field(...)
    policy_expiration_date: date = Field(...)

    premium: PremiumBreakdown = Field(...)
    risk_assessment: RiskAssessment = Field(...)

    is_eligible: bool = Field(...)
    eligibility_messages: list[str] = Field(default_factory=list)

    processing_time_ms: str = Field(..., description="Elapsed time, e.g. '3ms'")
    api_version: str = Field(default="1.0")

    @model_validator(mode="after")
    def validate_dates(self) -> "QuoteResponse":
        """Ensure the validity and policy windows are well formed."""
        if self.expiration_date <= self.quote_date:
            raise ValueError("Quote expiration must be after the quote date")
        if self.policy_expiration_date <= self.effective_date:
            raise ValueError("Policy expiration must be after the effective date")
        return self


@beartype
class PremiumEstimateRequest(BaseModelConfig):
    """Minimal input for a no-persistence premium preview."""

    product_type: ProductType = Field(...)
    state_code: str = Field(..., min_length=2, max_length=2)
    classification_code: str | None = Field(None, min_length=1, max_length=10)
    annual_payroll: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("100000000"),
        decimal_places=2,
    )
    annual_revenue: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("50000000"),
        decimal_places=2,
    )
    employee_count: int = Field(default=0, ge=0, le=10000)
    vehicle_count: int | None = Field(None, ge=1, le=500)
    years_in_business: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Assumed tenure when the caller does not know it",
    )
    coverage_limit: Decimal = Field(
        default=Decimal("1000000"),
        ge=Decimal("100000"),
        le=Decimal("5000000"),
    )
    deductible: Decimal = Field(
        default=Decimal("1000"),
        ge=Decimal("500"),
        le=Decimal("50000"),
    )

    @field_validator("state_code", "classification_code")
    @classmethod
    def uppercase_codes(cls, v: str | None) -> str | None:
        """Normalize codes so lookups are case-insensitive."""
        return v.upper() if v is not None else None

    @beartype
    def to_quote_request(self) -> QuoteRequest:
        """Build a placeholder quote request for the calculator."""
        return QuoteRequest(
            business_name="Estimate",
            tax_id="00-0000000",
            business_type=BusinessType.OFFICE,
            state_code=self.state_code,
            classification_code=self.classification_code or DEFAULT_CODE,
            product_type=self.product_type,
            annual_payroll=self.annual_payroll,
            annual_revenue=self.annual_revenue,
            employee_count=max(1, self.employee_count),
            years_in_business=self.years_in_business,
            vehicle_count=self.vehicle_count,
            coverage_limit=self.coverage_limit,
            deductible=self.deductible,
        )


@beartype
class PremiumEstimateResponse(BaseModelConfig):
    """Premium preview built from neutral risk."""

    estimated_annual_premium: Decimal = Field(...)
    estimated_monthly_premium: Decimal = Field(...)
    base_premium: Decimal = Field(...)
    minimum_premium: Decimal = Field(...)
    state_tax_rate: Decimal = Field(...)
    note: str = Field(...)
    premium: PremiumBreakdown = Field(...)
