# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium calculation.

All money math uses ``Decimal`` and every currency amount is quantized to
cents with ROUND_HALF_UP as soon as it is produced. The order of operations
is fixed: base premium, adjustments, subtotal, state tax, policy fee,
minimum premium floor, monthly conversion.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Final, assert_never

from beartype import beartype
from pydantic import ValidationError

from ...core.config import get_settings
from ...core.logging_utils import get_logger
from ...models.base import to_money
from ...models.premium import AdjustmentType, PremiumAdjustment, PremiumBreakdown
from ...models.quote import QuoteRequest
from ...models.rating import ProductType, RateTableEntry
from ...models.risk import RiskAssessment, RiskFactorType, RiskTier
from ..performance_monitor import performance_monitor

logger = get_logger(__name__)

PER_THOUSAND: Final = Decimal("1000")
BOP_PACKAGE_LOAD: Final = Decimal("1.25")
PROFESSIONAL_LOAD: Final = Decimal("0.80")
CYBER_REVENUE_LOAD: Final = Decimal("0.30")
CYBER_RECORD_CHARGE: Final = Decimal("50")
AUTO_VEHICLES_PER_EMPLOYEE: Final = Decimal("0.5")

TIER_FACTORS: Final[dict[RiskTier, Decimal]] = {
    RiskTier.PREFERRED: Decimal("-0.15"),
    RiskTier.STANDARD: Decimal("0"),
    RiskTier.NON_STANDARD: Decimal("0.25"),
    RiskTier.DECLINE: Decimal("0"),
}

LOYALTY_MIN_YEARS: Final = 5
LOYALTY_FACTOR: Final = Decimal("-0.05")

EXPERIENCE_MOD_MIN_YEARS: Final = 3
# (upper bound of claims severity, experience modification)
EXPERIENCE_MOD_TABLE: Final = (
    (Decimal("20"), Decimal("0.75")),
    (Decimal("30"), Decimal("0.85")),
    (Decimal("40"), Decimal("0.95")),
    (Decimal("50"), Decimal("1.00")),
    (Decimal("60"), Decimal("1.10")),
    (Decimal("70"), Decimal("1.20")),
    (Decimal("80"), Decimal("1.30")),
)
EXPERIENCE_MOD_MAX: Final = Decimal("1.50")

SAFETY_CREDIT_THRESHOLD: Final = Decimal("80")
SAFETY_CREDIT_FACTOR: Final = Decimal("-0.10")

BASELINE_LIMIT: Final = Decimal("1000000")
INCREASED_LIMIT_RATE: Final = Decimal("0.10")

# (minimum deductible, credit percentage), highest first
DEDUCTIBLE_CREDITS: Final = (
    (Decimal("25000"), Decimal("0.15")),
    (Decimal("10000"), Decimal("0.10")),
    (Decimal("5000"), Decimal("0.07")),
    (Decimal("2500"), Decimal("0.05")),
    (Decimal("1000"), Decimal("0.02")),
)

FACTOR_PLACES: Final = Decimal("0.0001")


def _worst_value(
    request: QuoteRequest, factor_type: RiskFactorType, *, highest: bool
) -> Decimal | None:
    """Least favourable value supplied for a factor type, if any."""
    values = [
        f.factor_value
        for f in request.risk_factors or ()
        if f.factor_type == factor_type
    ]
    if not values:
        return None
    return max(values) if highest else min(values)


class PremiumCalculationError(RuntimeError):
    """A computed breakdown broke a premium invariant (a defect, not input)."""


@beartype
class PremiumCalculator:
    """Turn a resolved rate and a risk assessment into a premium breakdown.

    The calculator holds only configuration and is safe to share between
    concurrent callers.
    """

    def __init__(self, policy_fees: Mapping[ProductType, Decimal] | None = None) -> None:
        """Initialize calculator with the per-product policy fee schedule."""
        fees = dict(policy_fees if policy_fees is not None else get_settings().policy_fees)
        missing = [p.value for p in ProductType if p not in fees]
        if missing:
            raise ValueError(f"Policy fee missing for: {', '.join(missing)}")
        self._policy_fees = fees

    @beartype
    def policy_fee(self, product_type: ProductType) -> Decimal:
        """Flat administrative fee for a product."""
        return to_money(self._policy_fees[product_type])

    @staticmethod
    @beartype
    def calculate_base_premium(
        request: QuoteRequest, rate_entry: RateTableEntry
    ) -> Decimal:
        """Calculate base premium as rate times the product's exposure basis.

        Args:
            request: Validated quote request supplying the exposure
            rate_entry: Resolved rate table entry

        Returns:
            Base premium rounded to the cent
        """
        rate = rate_entry.base_rate
        product = request.product_type
        match product:
            case ProductType.WORKERS_COMPENSATION:
                premium = request.annual_payroll / PER_THOUSAND * rate
            case ProductType.GENERAL_LIABILITY:
                premium = request.annual_revenue / PER_THOUSAND * rate
            case ProductType.BUSINESS_OWNERS_POLICY:
                premium = request.annual_revenue / PER_THOUSAND * rate * BOP_PACKAGE_LOAD
            case ProductType.COMMERCIAL_AUTO:
                if request.vehicle_count is not None:
                    vehicles = Decimal(request.vehicle_count)
                else:
                    employees = Decimal(max(1, request.employee_count))
                    vehicles = max(Decimal("1"), employees * AUTO_VEHICLES_PER_EMPLOYEE)
                premium = vehicles * rate
            case ProductType.PROFESSIONAL_LIABILITY:
                premium = request.annual_revenue / PER_THOUSAND * rate * PROFESSIONAL_LOAD
            case ProductType.CYBER_LIABILITY:
                records = Decimal(max(1, request.employee_count))
                premium = (
                    request.annual_revenue / PER_THOUSAND * rate * CYBER_REVENUE_LOAD
                    + records * CYBER_RECORD_CHARGE
                )
            case _:
                assert_never(product)
        return to_money(premium)

    @staticmethod
    @beartype
    def experience_modification(
        request: QuoteRequest,
    ) -> Decimal:
        """Workers' comp experience mod from the highest claims factor."""
        if request.years_in_business < EXPERIENCE_MOD_MIN_YEARS:
            return Decimal("1.00")
        claims = _worst_value(request, RiskFactorType.CLAIMS, highest=True)
        if claims is None:
            return Decimal("1.00")
        for upper_bound, modifier in EXPERIENCE_MOD_TABLE:
            if claims <= upper_bound:
                return modifier
        return EXPERIENCE_MOD_MAX

    @staticmethod
    @beartype
    def deductible_credit_rate(deductible: Decimal) -> Decimal:
        """Credit percentage earned by a deductible."""
        for minimum, credit in DEDUCTIBLE_CREDITS:
            if deductible >= minimum:
                return credit
        return Decimal("0")

    @beartype
    def calculate_adjustments(
        self,
        request: QuoteRequest,
        risk_assessment: RiskAssessment,
        base_premium: Decimal,
    ) -> list[PremiumAdjustment]:
        """Derive rating adjustments, each priced against the base premium."""
        adjustments: list[PremiumAdjustment] = []

        def add(code: str, description: str, factor: Decimal) -> None:
            if factor == 0:
                return
            if code in ("TIER", "LOYAL"):
                kind = AdjustmentType.DISCOUNT if factor < 0 else AdjustmentType.SURCHARGE
            elif code == "ILF":
                kind = AdjustmentType.SURCHARGE
            else:
                kind = AdjustmentType.CREDIT if factor < 0 else AdjustmentType.DEBIT
            adjustments.append(
                PremiumAdjustment(
                    code=code,
                    description=description,
                    type=kind,
                    factor=factor,
                    amount=to_money(base_premium * factor),
                )
            )

        tier = risk_assessment.risk_tier
        add("TIER", f"{tier.value} Tier Adjustment", TIER_FACTORS[tier])

        if request.product_type == ProductType.WORKERS_COMPENSATION:
            exp_mod = self.experience_modification(request)
            add("EXPMOD", "Experience Modification", exp_mod - 1)

        if request.years_in_business >= LOYALTY_MIN_YEARS:
            add("LOYAL", "Established Business Discount", LOYALTY_FACTOR)

        safety = _worst_value(request, RiskFactorType.SAFETY, highest=False)
        if safety is not None and safety >= SAFETY_CREDIT_THRESHOLD:
            add("SAFETY", "Safety Program Credit", SAFETY_CREDIT_FACTOR)

        if request.coverage_limit > BASELINE_LIMIT:
            excess = (request.coverage_limit - BASELINE_LIMIT) / BASELINE_LIMIT
            add(
                "ILF",
                "Increased Limits Surcharge",
                (excess * INCREASED_LIMIT_RATE).quantize(FACTOR_PLACES),
            )

        credit = self.deductible_credit_rate(request.deductible)
        add("DED", "Deductible Credit", -credit)

        return adjustments

    @performance_monitor("calculate_premium", max_duration_ms=10)
    def calculate(
        self,
        request: QuoteRequest,
        risk_assessment: RiskAssessment,
        rate_entry: RateTableEntry,
    ) -> PremiumBreakdown:
        """Compute the full premium breakdown.

        Pure function of its inputs: identical arguments always produce an
        identical breakdown.

        Raises:
            PremiumCalculationError: if the computed figures break a premium
                invariant
        """
        if rate_entry.is_synthetic:
            return PremiumBreakdown.zero()

        base_premium = self.calculate_base_premium(request, rate_entry)
        adjustments = self.calculate_adjustments(request, risk_assessment, base_premium)
        total_adjustments = sum((a.amount for a in adjustments), Decimal("0.00"))

        subtotal = max(Decimal("0.00"), base_premium + total_adjustments)
        state_tax = to_money(subtotal * rate_entry.state_tax_rate)
        policy_fee = self.policy_fee(request.product_type)
        minimum_premium = to_money(rate_entry.min_premium)
        annual_premium = to_money(max(minimum_premium, subtotal + state_tax + policy_fee))
        monthly_premium = to_money(annual_premium / 12)

        logger.debug(
            "Premium for %s/%s: base=%s adjustments=%s tax=%s fee=%s annual=%s",
            rate_entry.state_code,
            request.product_type.value,
            base_premium,
            total_adjustments,
            state_tax,
            policy_fee,
            annual_premium,
        )

        try:
            return PremiumBreakdown(
                base_premium=base_premium,
                adjustments=adjustments,
                total_adjustments=total_adjustments,
                subtotal=subtotal,
                state_tax=state_tax,
                policy_fee=policy_fee,
                annual_premium=annual_premium,
                monthly_premium=monthly_premium,
                minimum_premium=minimum_premium,
            )
        except ValidationError as e:
            raise PremiumCalculationError(f"Premium invariants violated: {e}") from e
