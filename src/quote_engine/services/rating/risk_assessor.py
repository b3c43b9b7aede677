# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Weighted risk scoring.

Every factor type is normalized to a 0-100 sub-score where higher means a
worse risk, then combined with fixed weights. Types the caller did not
supply score a neutral 50 so partial input cannot skew the aggregate.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Final, assert_never

from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.risk import (
    FactorImpact,
    RiskAssessment,
    RiskFactor,
    RiskFactorScore,
    RiskFactorType,
    RiskTier,
)

logger = get_logger(__name__)

FACTOR_WEIGHTS: Final[dict[RiskFactorType, Decimal]] = {
    RiskFactorType.CREDIT: Decimal("0.30"),
    RiskFactorType.CLAIMS: Decimal("0.30"),
    RiskFactorType.SAFETY: Decimal("0.20"),
    RiskFactorType.EXPERIENCE: Decimal("0.10"),
    RiskFactorType.INDUSTRY: Decimal("0.10"),
}

NEUTRAL_SCORE: Final = 50

_FACTOR_LABELS: Final[dict[RiskFactorType, str]] = {
    RiskFactorType.CREDIT: "Credit",
    RiskFactorType.CLAIMS: "Claims History",
    RiskFactorType.SAFETY: "Safety Program",
    RiskFactorType.EXPERIENCE: "Management Experience",
    RiskFactorType.INDUSTRY: "Industry Risk",
}

_CREDIT_FLOOR: Final = Decimal("300")
_CREDIT_CEILING: Final = Decimal("850")


def _clamp_score(value: Decimal) -> int:
    clamped = min(Decimal("100"), max(Decimal("0"), value))
    return int(clamped.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@beartype
def score_factor(factor_type: RiskFactorType, raw_value: Decimal) -> int:
    """Normalize a raw factor value to a 0-100 sub-score.

    Args:
        factor_type: Which scale ``raw_value`` is expressed in
        raw_value: Credit score (300-850), claims severity (0-100), safety
            program rating (0-100), years of experience, or industry hazard
            (0-100)

    Returns:
        Sub-score where 0 is the best possible risk and 100 the worst
    """
    match factor_type:
        case RiskFactorType.CREDIT:
            span = _CREDIT_CEILING - _CREDIT_FLOOR
            return _clamp_score((_CREDIT_CEILING - raw_value) / span * 100)
        case RiskFactorType.CLAIMS:
            return _clamp_score(raw_value)
        case RiskFactorType.SAFETY:
            return _clamp_score(100 - raw_value)
        case RiskFactorType.EXPERIENCE:
            return _clamp_score(100 - raw_value * 10)
        case RiskFactorType.INDUSTRY:
            return _clamp_score(raw_value)
        case _:
            assert_never(factor_type)


@beartype
class RiskAssessor:
    """Compute a weighted risk score and tier from risk factors."""

    def __init__(self, weights: dict[RiskFactorType, Decimal] | None = None) -> None:
        """Initialize assessor, validating that weights cover every type."""
        weights = dict(weights or FACTOR_WEIGHTS)
        missing = [t.value for t in RiskFactorType if t not in weights]
        if missing:
            raise ValueError(f"Missing weights for factor types: {', '.join(missing)}")
        if sum(weights.values()) != Decimal("1"):
            raise ValueError("Risk factor weights must sum to 1.0")
        self._weights = weights

    @staticmethod
    @beartype
    def neutral() -> RiskAssessment:
        """Assessment used when no risk data is available."""
        return RiskAssessment(
            risk_score=NEUTRAL_SCORE,
            risk_tier=RiskTier.STANDARD,
            factor_scores=[],
            notes=["No risk factors supplied - neutral assessment applied"],
        )

    @beartype
    def assess(self, factors: Sequence[RiskFactor]) -> RiskAssessment:
        """Score a set of risk factors.

        A factor type supplied more than once counts at its worst sub-score.
        """
        if not factors:
            return self.neutral()

        supplied: dict[RiskFactorType, tuple[int, str]] = {}
        for factor in factors:
            score = score_factor(factor.factor_type, factor.factor_value)
            current = supplied.get(factor.factor_type)
            if current is None or score > current[0]:
                supplied[factor.factor_type] = (score, factor.factor_name)

        factor_scores: list[RiskFactorScore] = []
        weighted_sum = Decimal("0")
        for factor_type in RiskFactorType:
            score, name = supplied.get(
                factor_type, (NEUTRAL_SCORE, _FACTOR_LABELS[factor_type])
            )
            weight = self._weights[factor_type]
            weighted_sum += weight * score
            factor_scores.append(
                RiskFactorScore(
                    factor_name=name,
                    factor_type=factor_type,
                    score=score,
                    weight=weight,
                    impact=FactorImpact.from_score(score),
                )
            )

        risk_score = _clamp_score(weighted_sum)
        risk_tier = RiskTier.from_score(risk_score)
        notes = self._underwriting_notes(risk_tier, supplied)

        logger.info(
            "Risk assessment complete: Score=%d, Tier=%s", risk_score, risk_tier.value
        )

        return RiskAssessment(
            risk_score=risk_score,
            risk_tier=risk_tier,
            factor_scores=factor_scores,
            notes=notes,
        )

    @staticmethod
    def _underwriting_notes(
        tier: RiskTier, supplied: dict[RiskFactorType, tuple[int, str]]
    ) -> list[str]:
        notes: list[str] = []

        match tier:
            case RiskTier.PREFERRED:
                notes.append(
                    "Account qualifies for preferred rates based on favorable risk profile"
                )
            case RiskTier.STANDARD:
                pass
            case RiskTier.NON_STANDARD:
                notes.append("Non-standard tier - premium surcharge applied")
            case RiskTier.DECLINE:
                notes.append("Risk score exceeds appetite - refer to decline")
            case _:
                assert_never(tier)

        missing = [t.value for t in RiskFactorType if t not in supplied]
        if missing:
            notes.append(f"Neutral score assumed for: {', '.join(missing)}")

        claims = supplied.get(RiskFactorType.CLAIMS)
        if claims is not None and claims[0] >= 70:
            notes.append("Adverse claims history - review loss runs")

        safety = supplied.get(RiskFactorType.SAFETY)
        if safety is not None and safety[0] <= 20:
            notes.append("Formal safety program in place - positive indicator")

        return notes
