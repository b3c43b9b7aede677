# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from beartype import beartype
from fastapi import APIRouter, Depends
from pydantic import Field

from ...core.config import Settings
from ...models.base import BaseModelConfig
from ...services.performance_monitor import performance_tracker
from ...services.quote_repository import InMemoryQuoteRepository
from ...services.rating import InMemoryRateTable
from ..dependencies import get_app_settings, get_quote_repository, get_rate_table

router = APIRouter()


class HealthResponse(BaseModelConfig):
    """Overall service health."""

    status: str = Field(..., pattern=r"^(healthy|degraded)$")
    timestamp: datetime = Field(...)
    version: str = Field(...)
    environment: str = Field(...)
    rate_table_entries: int = Field(..., ge=0)
    quotes_stored: int = Field(..., ge=0)


@router.get("/health", response_model=HealthResponse)
@beartype
async def health_check(
    settings: Settings = Depends(get_app_settings),
    rate_table: InMemoryRateTable = Depends(get_rate_table),
    repository: InMemoryQuoteRepository = Depends(get_quote_repository),
) -> HealthResponse:
    """Report service status; an empty rate table is reported as degraded."""
    entries = rate_table.entry_count
    return HealthResponse(
        status="healthy" if entries else "degraded",
        timestamp=datetime.now(UTC),
        version=settings.api_version,
        environment=settings.api_env,
        rate_table_entries=entries,
        quotes_stored=len(repository),
    )


@router.get("/health/performance")
@beartype
async def performance_stats() -> dict[str, dict[str, Any]]:
    """Timing statistics for monitored operations."""
    return performance_tracker.get_all_stats()
