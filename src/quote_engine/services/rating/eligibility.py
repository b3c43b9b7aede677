# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Underwriting eligibility rules.

Every rule is checked and every failing rule is reported, so the caller
always receives the complete rationale. Decline rules flip eligibility;
referral rules only add a warning.
"""

from decimal import Decimal
from typing import Final

from attrs import field, frozen
from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.quote import BusinessType, EligibilityResult, QuoteRequest
from ...models.rating import ProductType
from ...models.risk import RiskAssessment, RiskTier

logger = get_logger(__name__)

HIGH_PAYROLL_THRESHOLD: Final = Decimal("10000000")
CONSTRUCTION_EXPERIENCE_YEARS: Final = 3


@frozen
class EligibilityRules:
    """Hard limits and referral thresholds for one product."""

    min_years_in_business: int = field(default=1)
    min_employees: int = field(default=0)
    max_employees: int = field(default=10000)
    min_revenue: Decimal = field(default=Decimal("0"))
    max_revenue: Decimal = field(default=Decimal("50000000"))
    referral_coverage_limit: Decimal = field(default=Decimal("2000000"))


DEFAULT_PRODUCT_RULES: Final[dict[ProductType, EligibilityRules]] = {
    ProductType.WORKERS_COMPENSATION: EligibilityRules(
        min_employees=1,
        referral_coverage_limit=Decimal("1000000"),
    ),
    ProductType.GENERAL_LIABILITY: EligibilityRules(),
    ProductType.BUSINESS_OWNERS_POLICY: EligibilityRules(
        max_employees=100,
        max_revenue=Decimal("10000000"),
    ),
    ProductType.COMMERCIAL_AUTO: EligibilityRules(
        min_employees=1,
        referral_coverage_limit=Decimal("1000000"),
    ),
    ProductType.PROFESSIONAL_LIABILITY: EligibilityRules(),
    ProductType.CYBER_LIABILITY: EligibilityRules(
        referral_coverage_limit=Decimal("3000000"),
    ),
}


def _money(value: Decimal) -> str:
    return f"${value:,.0f}"


@beartype
class EligibilityEvaluator:
    """Decide accept, refer or decline for a quote request."""

    def __init__(
        self, product_rules: dict[ProductType, EligibilityRules] | None = None
    ) -> None:
        """Initialize evaluator with per-product rules."""
        rules = dict(product_rules or DEFAULT_PRODUCT_RULES)
        missing = [p.value for p in ProductType if p not in rules]
        if missing:
            raise ValueError(f"Eligibility rules missing for: {', '.join(missing)}")
        self._rules = rules

    @beartype
    def rules_for(self, product_type: ProductType) -> EligibilityRules:
        """Rules applied to a product."""
        return self._rules[product_type]

    @beartype
    def evaluate(
        self, request: QuoteRequest, risk_assessment: RiskAssessment
    ) -> EligibilityResult:
        """Evaluate all decline and referral rules.

        Args:
            request: Validated quote request
            risk_assessment: Risk view of the same business

        Returns:
            EligibilityResult carrying every decline and referral reason
        """
        rules = self._rules[request.product_type]
        product = request.product_type.value
        messages: list[str] = []
        warnings: list[str] = []
        referral_reason: str | None = None

        # Decline rules
        if risk_assessment.risk_tier == RiskTier.DECLINE:
            messages.append(
                f"Risk assessment indicates decline: score {risk_assessment.risk_score} "
                f"falls in the {RiskTier.DECLINE.value} tier"
            )

        if request.years_in_business < rules.min_years_in_business:
            plural = "year" if rules.min_years_in_business == 1 else "years"
            messages.append(
                f"Business must have at least {rules.min_years_in_business} {plural} "
                f"of operating history for {product}"
            )

        if request.employee_count < rules.min_employees:
            messages.append(
                f"{product} requires at least {rules.min_employees} employee(s)"
            )
        elif request.employee_count > rules.max_employees:
            messages.append(
                f"Employee count {request.employee_count} exceeds the "
                f"{rules.max_employees} maximum for {product}"
            )

        if request.annual_revenue < rules.min_revenue:
            messages.append(
                f"Annual revenue below the {_money(rules.min_revenue)} minimum for {product}"
            )
        elif request.annual_revenue > rules.max_revenue:
            messages.append(
                f"Annual revenue exceeds the {_money(rules.max_revenue)} maximum for {product}"
            )

        # Referral rules
        if risk_assessment.risk_tier == RiskTier.NON_STANDARD:
            warnings.append("Non-standard risk tier - quote requires underwriter review")
            referral_reason = "Non-standard risk tier"

        if request.coverage_limit > rules.referral_coverage_limit:
            warnings.append(
                f"Coverage limits over {_money(rules.referral_coverage_limit)} "
                f"require underwriter review for {product}"
            )
            referral_reason = referral_reason or "Coverage limit exceeds referral threshold"

        if request.annual_payroll > HIGH_PAYROLL_THRESHOLD:
            warnings.append("High payroll - quote may require underwriter review")
            referral_reason = referral_reason or "Annual payroll exceeds $10M threshold"

        if (
            request.business_type == BusinessType.CONSTRUCTION
            and request.years_in_business < CONSTRUCTION_EXPERIENCE_YEARS
        ):
            warnings.append(
                "Construction businesses with less than 3 years experience "
                "may have limited coverage options"
            )

        is_eligible = not messages
        if not is_eligible:
            logger.info(
                "Business %s not eligible for %s: %s",
                request.business_name,
                product,
                "; ".join(messages),
            )

        return EligibilityResult(
            is_eligible=is_eligible,
            messages=messages,
            warnings=warnings,
            referral_reason=referral_reason,
        )
