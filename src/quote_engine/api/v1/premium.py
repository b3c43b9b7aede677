# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium estimate endpoint."""

from beartype import beartype
from fastapi import APIRouter, Depends

from ...models.quote import PremiumEstimateRequest, PremiumEstimateResponse
from ...services.quote_service import QuoteService
from ..dependencies import get_quote_service

router = APIRouter(prefix="/premium", tags=["premium"])


@router.post("/estimate", response_model=PremiumEstimateResponse)
@beartype
async def estimate_premium(
    estimate_request: PremiumEstimateRequest,
    quote_service: QuoteService = Depends(get_quote_service),
) -> PremiumEstimateResponse:
    """Quick premium preview at neutral risk. Nothing is stored."""
    return await quote_service.estimate_premium(estimate_request)
