# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote history storage."""

import asyncio
from typing import Protocol, runtime_checkable

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.quote import QuoteResponse


@runtime_checkable
class QuoteRepository(Protocol):
    """Append-only store of issued quotes."""

    async def put(self, quote: QuoteResponse, tax_id: str) -> Result[None, str]: ...

    async def get(self, quote_number: str) -> QuoteResponse | None: ...

    async def exists(self, quote_number: str) -> bool: ...

    async def history(self, tax_id: str) -> list[QuoteResponse]: ...


@beartype
class InMemoryQuoteRepository:
    """Quote history held in process memory.

    Writes are serialized by an ``asyncio.Lock``. Stored quotes are frozen
    models, so a reader either sees a whole quote or nothing.
    """

    def __init__(self) -> None:
        """Initialize empty store and tax id index."""
        self._quotes: dict[str, QuoteResponse] = {}
        self._tax_id_index: dict[str, list[str]] = {}
        self._lock = asyncio.Lock()

    @beartype
    async def put(self, quote: QuoteResponse, tax_id: str) -> Result[None, str]:
        """Append a quote; an existing quote number is never overwritten."""
        async with self._lock:
            if quote.quote_number in self._quotes:
                return Err(f"Quote number {quote.quote_number} already exists")
            self._quotes[quote.quote_number] = quote
            if tax_id:
                self._tax_id_index.setdefault(tax_id, []).append(quote.quote_number)
        return Ok(None)

    @beartype
    async def get(self, quote_number: str) -> QuoteResponse | None:
        """Look up a quote by number."""
        return self._quotes.get(quote_number)

    @beartype
    async def exists(self, quote_number: str) -> bool:
        """Check whether a quote number is taken."""
        return quote_number in self._quotes

    @beartype
    async def history(self, tax_id: str) -> list[QuoteResponse]:
        """All quotes for a business, newest first.

        Quotes issued at the same instant come back in reverse write order.
        """
        numbers = list(self._tax_id_index.get(tax_id, ()))
        ranked = sorted(
            enumerate(self._quotes[n] for n in numbers if n in self._quotes),
            key=lambda item: (item[1].quote_date, item[0]),
            reverse=True,
        )
        return [quote for _, quote in ranked]

    def __len__(self) -> int:
        return len(self._quotes)
