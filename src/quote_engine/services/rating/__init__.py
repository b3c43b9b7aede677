# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rating engine services package.

This package provides the deterministic rating pipeline:
- Hierarchical rate resolution with fallback
- Weighted risk scoring and tiering
- Premium calculation with Decimal money math
- Eligibility (accept/refer/decline) rules
"""

from .calculators import PremiumCalculationError, PremiumCalculator
from .eligibility import EligibilityEvaluator, EligibilityRules
from .rate_resolver import RateResolver
from .rate_tables import (
    InMemoryRateTable,
    RateLookup,
    build_default_rate_table,
    seed_classification_codes,
    seed_rate_entries,
)
from .risk_assessor import RiskAssessor, score_factor

__all__ = [
    # Rate resolution
    "RateLookup",
    "InMemoryRateTable",
    "RateResolver",
    "build_default_rate_table",
    "seed_rate_entries",
    "seed_classification_codes",
    # Risk
    "RiskAssessor",
    "score_factor",
    # Premium
    "PremiumCalculator",
    "PremiumCalculationError",
    # Eligibility
    "EligibilityEvaluator",
    "EligibilityRules",
]
