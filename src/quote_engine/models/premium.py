# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium breakdown models.

Every currency field is a ``Decimal`` quantized to cents. The breakdown
validates its own arithmetic on construction so that a breakdown which
violates the premium invariants can never leave the calculator.
"""

from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, to_money


class AdjustmentType(str, Enum):
    """Kind of premium adjustment."""

    DISCOUNT = "Discount"
    SURCHARGE = "Surcharge"
    CREDIT = "Credit"
    DEBIT = "Debit"


@beartype
class PremiumAdjustment(BaseModelConfig):
    """One rating adjustment applied to the base premium."""

    code: str = Field(..., min_length=1, max_length=20)
    description: str = Field(..., min_length=1, max_length=200)
    type: AdjustmentType = Field(...)
    factor: Decimal = Field(..., description="Signed multiplier applied to base")
    amount: Decimal = Field(
        ..., description="Signed currency impact; credits and discounts are negative"
    )

    @model_validator(mode="after")
    def validate_sign(self) -> "PremiumAdjustment":
        """Discounts and credits reduce premium, surcharges and debits add to it."""
        if self.type in (AdjustmentType.DISCOUNT, AdjustmentType.CREDIT):
            if self.amount > 0:
                raise ValueError(f"{self.type.value} {self.code} must not be positive")
        elif self.amount < 0:
            raise ValueError(f"{self.type.value} {self.code} must not be negative")
        return self


@beartype
class PremiumBreakdown(BaseModelConfig):
    """Full premium computation result."""

    base_premium: Decimal = Field(..., ge=Decimal("0"))
    adjustments: list[PremiumAdjustment] = Field(default_factory=list)
    total_adjustments: Decimal = Field(...)
    subtotal: Decimal = Field(..., ge=Decimal("0"))
    state_tax: Decimal = Field(..., ge=Decimal("0"))
    policy_fee: Decimal = Field(..., ge=Decimal("0"))
    annual_premium: Decimal = Field(..., ge=Decimal("0"))
    monthly_premium: Decimal = Field(..., ge=Decimal("0"))
    minimum_premium: Decimal = Field(..., ge=Decimal("0"))

    @model_validator(mode="after")
    def validate_arithmetic(self) -> "PremiumBreakdown":
        """Enforce the premium invariants."""
        adjustment_sum = sum((a.amount for a in self.adjustments), Decimal("0"))
        if adjustment_sum != self.total_adjustments:
            raise ValueError(
                f"Adjustments sum to {adjustment_sum}, "
                f"total_adjustments is {self.total_adjustments}"
            )
        if self.annual_premium < self.minimum_premium:
            raise ValueError("Annual premium is below the minimum premium")
        expected_annual = to_money(
            max(self.minimum_premium, self.subtotal + self.state_tax + self.policy_fee)
        )
        if self.annual_premium != expected_annual:
            raise ValueError(
                f"Annual premium {self.annual_premium} != expected {expected_annual}"
            )
        if self.monthly_premium != to_money(self.annual_premium / 12):
            raise ValueError("Monthly premium is not annual premium / 12")
        return self

    @classmethod
    @beartype
    def zero(cls) -> "PremiumBreakdown":
        """Empty breakdown used when no rate could be resolved."""
        zero = Decimal("0.00")
        return cls(
            base_premium=zero,
            adjustments=[],
            total_adjustments=zero,
            subtotal=zero,
            state_tax=zero,
            policy_fee=zero,
            annual_premium=zero,
            monthly_premium=zero,
            minimum_premium=zero,
        )
