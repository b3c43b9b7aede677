# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote API endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException, status

from ...models.quote import QuoteRequest, QuoteResponse
from ...services.quote_service import QuoteNumberExhaustedError, QuoteService
from ..dependencies import get_quote_service

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteResponse)
@beartype
async def create_quote(
    quote_request: QuoteRequest,
    quote_service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    """Rate a business and issue a quote.

    Ineligible businesses still receive a priced quote with status
    ``Declined`` and the reasons in ``eligibility_messages``.
    """
    try:
        return await quote_service.create_quote(quote_request)
    except QuoteNumberExhaustedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from e


@router.get("/history/{tax_id}", response_model=list[QuoteResponse])
@beartype
async def get_quote_history(
    tax_id: str,
    quote_service: QuoteService = Depends(get_quote_service),
) -> list[QuoteResponse]:
    """List quotes issued to a business, newest first."""
    return await quote_service.get_quote_history(tax_id)


@router.get("/{quote_number}", response_model=QuoteResponse)
@beartype
async def get_quote(
    quote_number: str,
    quote_service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    """Get quote by number."""
    result = await quote_service.get_quote(quote_number)

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return result.ok_value
