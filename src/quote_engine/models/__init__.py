# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models package for the quote engine.

This package exports all Pydantic domain models with strict validation
and immutability.
"""

from .base import BaseModelConfig, to_money
from .premium import AdjustmentType, PremiumAdjustment, PremiumBreakdown
from .quote import (
    BusinessType,
    EligibilityResult,
    PremiumEstimateRequest,
    PremiumEstimateResponse,
    QuoteRequest,
    QuoteResponse,
    QuoteStatus,
    is_valid_quote_number,
)
from .rating import DEFAULT_CODE, ClassificationCode, ProductType, RateTableEntry
from .risk import (
    FactorImpact,
    RiskAssessment,
    RiskFactor,
    RiskFactorScore,
    RiskFactorType,
    RiskTier,
)

__all__ = [
    # Base
    "BaseModelConfig",
    "to_money",
    # Rating reference data
    "DEFAULT_CODE",
    "ProductType",
    "RateTableEntry",
    "ClassificationCode",
    # Risk
    "RiskFactorType",
    "RiskFactor",
    "RiskFactorScore",
    "RiskTier",
    "FactorImpact",
    "RiskAssessment",
    # Premium
    "AdjustmentType",
    "PremiumAdjustment",
    "PremiumBreakdown",
    # Quote
    "BusinessType",
    "QuoteStatus",
    "QuoteRequest",
    "EligibilityResult",
    "QuoteResponse",
    "PremiumEstimateRequest",
    "PremiumEstimateResponse",
    "is_valid_quote_number",
]
