# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Risk factor and risk assessment models."""

from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig


class RiskFactorType(str, Enum):
    """Families of underwriting information a factor can carry."""

    CREDIT = "Credit"
    CLAIMS = "Claims"
    SAFETY = "Safety"
    EXPERIENCE = "Experience"
    INDUSTRY = "Industry"


class RiskTier(str, Enum):
    """Underwriting bucket derived from the risk score."""

    PREFERRED = "Preferred"
    STANDARD = "Standard"
    NON_STANDARD = "NonStandard"
    DECLINE = "Decline"

    @classmethod
    @beartype
    def from_score(cls, score: int) -> "RiskTier":
        """Map a 0-100 score onto a tier using fixed thresholds."""
        if score < 30:
            return cls.PREFERRED
        if score < 60:
            return cls.STANDARD
        if score < 85:
            return cls.NON_STANDARD
        return cls.DECLINE


class FactorImpact(str, Enum):
    """Direction a scored factor pushes the assessment."""

    FAVORABLE = "Favorable"
    NEUTRAL = "Neutral"
    UNFAVORABLE = "Unfavorable"

    @classmethod
    @beartype
    def from_score(cls, score: int) -> "FactorImpact":
        if score <= 30:
            return cls.FAVORABLE
        if score >= 60:
            return cls.UNFAVORABLE
        return cls.NEUTRAL


@beartype
class RiskFactor(BaseModelConfig):
    """Raw underwriting input supplied with a quote request."""

    factor_code: str = Field(..., min_length=1, max_length=20)
    factor_name: str = Field(..., min_length=1, max_length=100)
    factor_value: Decimal = Field(
        ..., description="Raw value; its scale depends on the factor type"
    )
    factor_type: RiskFactorType = Field(...)


@beartype
class RiskFactorScore(BaseModelConfig):
    """A factor normalized to a 0-100 sub-score (higher is worse)."""

    factor_name: str = Field(..., min_length=1, max_length=100)
    factor_type: RiskFactorType = Field(...)
    score: int = Field(..., ge=0, le=100)
    weight: Decimal = Field(..., ge=Decimal("0"), le=Decimal("1"))
    impact: FactorImpact = Field(...)


@beartype
class RiskAssessment(BaseModelConfig):
    """Aggregate risk view of a business."""

    risk_score: int = Field(..., ge=0, le=100)
    risk_tier: RiskTier = Field(...)
    factor_scores: list[RiskFactorScore] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_tier(self) -> "RiskAssessment":
        """The tier must always agree with the score."""
        expected = RiskTier.from_score(self.risk_score)
        if self.risk_tier != expected:
            raise ValueError(
                f"Risk tier {self.risk_tier.value} does not match score "
                f"{self.risk_score} (expected {expected.value})"
            )
        return self
