# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rate table reference data models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Final

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig

DEFAULT_CODE: Final = "DEFAULT"


class ProductType(str, Enum):
    """Commercial lines products that can be quoted."""

    WORKERS_COMPENSATION = "WorkersCompensation"
    GENERAL_LIABILITY = "GeneralLiability"
    BUSINESS_OWNERS_POLICY = "BusinessOwnersPolicy"
    COMMERCIAL_AUTO = "CommercialAuto"
    PROFESSIONAL_LIABILITY = "ProfessionalLiability"
    CYBER_LIABILITY = "CyberLiability"


@beartype
class RateTableEntry(BaseModelConfig):
    """A single row of the rate table, keyed by state, class and product."""

    state_code: str = Field(
        ...,
        min_length=1,
        max_length=7,
        description="Two-letter state code or DEFAULT",
    )
    classification_code: str = Field(
        ..., min_length=1, max_length=10, description="Class code or DEFAULT"
    )
    product_type: ProductType = Field(..., description="Product this rate prices")
    base_rate: Decimal = Field(
        ..., ge=Decimal("0"), description="Rate per exposure unit"
    )
    min_premium: Decimal = Field(
        ..., ge=Decimal("0"), description="Minimum annual premium"
    )
    state_tax_rate: Decimal = Field(
        ...,
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Premium tax rate applied to the subtotal",
    )
    is_active: bool = Field(default=True, description="Whether the rate may be used")
    effective_date: date = Field(..., description="First day the rate applies")
    expiration_date: date | None = Field(
        None, description="Day the rate stops applying (exclusive)"
    )
    is_synthetic: bool = Field(
        default=False,
        description="True only for the no-rate sentinel produced on a full miss",
    )

    @field_validator("state_code", "classification_code")
    @classmethod
    def normalize_codes(cls, v: str) -> str:
        """Codes are compared case-insensitively, so store them upper-case."""
        return v.upper()

    @model_validator(mode="after")
    def validate_dates(self) -> "RateTableEntry":
        """Expiration must fall after the effective date."""
        if self.expiration_date is not None and self.expiration_date <= self.effective_date:
            raise ValueError("Expiration date must be after effective date")
        return self

    @beartype
    def applies_on(self, as_of: date | None) -> bool:
        """Check the active flag and, when a date is given, the rate window."""
        if not self.is_active:
            return False
        if as_of is None:
            return True
        if self.effective_date > as_of:
            return False
        return self.expiration_date is None or as_of < self.expiration_date

    @classmethod
    @beartype
    def no_rate(
        cls,
        state_code: str,
        classification_code: str,
        product_type: ProductType,
    ) -> "RateTableEntry":
        """Build the zero-rate sentinel returned when every fallback misses.

        Skips validation: the codes echo whatever the caller asked for, and
        a full miss must still produce an entry.
        """
        return cls.model_construct(
            state_code=state_code,
            classification_code=classification_code,
            product_type=product_type,
            base_rate=Decimal("0"),
            min_premium=Decimal("0"),
            state_tax_rate=Decimal("0"),
            is_active=False,
            effective_date=date.min,
            is_synthetic=True,
        )


@beartype
class ClassificationCode(BaseModelConfig):
    """Industry classification available for a product."""

    code: str = Field(..., min_length=1, max_length=10)
    description: str = Field(..., min_length=1, max_length=200)
    product_type: ProductType = Field(...)
    hazard_group: str = Field(..., pattern="^[A-G]$")
    is_active: bool = Field(default=True)
