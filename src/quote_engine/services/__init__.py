# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Business logic services for the quote engine."""

from .performance_monitor import performance_monitor, performance_tracker
from .quote_repository import InMemoryQuoteRepository, QuoteRepository
from .quote_service import QuoteNumberExhaustedError, QuoteService

__all__ = [
    "QuoteService",
    "QuoteNumberExhaustedError",
    "QuoteRepository",
    "InMemoryQuoteRepository",
    "performance_monitor",
    "performance_tracker",
]
