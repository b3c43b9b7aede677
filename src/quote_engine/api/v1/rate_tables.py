# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rate table reference endpoints."""

from datetime import date

from beartype import beartype
from fastapi import APIRouter, Depends, Path, Query

from ...models.rating import (
    DEFAULT_CODE,
    ClassificationCode,
    ProductType,
    RateTableEntry,
)
from ...services.rating import InMemoryRateTable, RateResolver
from ..dependencies import get_rate_resolver, get_rate_table

router = APIRouter(prefix="/rate-tables", tags=["rate-tables"])


@router.get("", response_model=list[RateTableEntry])
@beartype
async def list_rate_tables(
    state_code: str | None = Query(None, min_length=2, max_length=7),
    product_type: ProductType | None = Query(None),
    rate_table: InMemoryRateTable = Depends(get_rate_table),
) -> list[RateTableEntry]:
    """List stored rate entries, optionally filtered."""
    return rate_table.list_rates(state_code=state_code, product_type=product_type)


# Registered before the two-segment rate route so "classifications" is not
# taken for a state code.
@router.get(
    "/classifications/{product_type}", response_model=list[ClassificationCode]
)
@beartype
async def get_classification_codes(
    product_type: ProductType,
    rate_table: InMemoryRateTable = Depends(get_rate_table),
) -> list[ClassificationCode]:
    """Active classification codes for a product."""
    return rate_table.get_classification_codes(product_type)


@router.get("/{state_code}/{product_type}", response_model=RateTableEntry)
@beartype
async def get_rate(
    product_type: ProductType,
    state_code: str = Path(..., min_length=2, max_length=2, pattern="^[A-Za-z]{2}$"),
    classification_code: str = Query(
        DEFAULT_CODE, min_length=1, max_length=10, pattern="^[A-Za-z0-9]+$"
    ),
    as_of: date | None = Query(None),
    resolver: RateResolver = Depends(get_rate_resolver),
) -> RateTableEntry:
    """Resolve the rate that would be used for a quote.

    A full miss returns the zero-rate entry flagged ``is_synthetic``.
    """
    return await resolver.resolve(
        state_code, classification_code, product_type, as_of=as_of
    )
