# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Commercial Quote Engine - Main Application Module."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI
from pydantic import Field

from .api.dependencies import init_app_state
from .api.v1 import router as v1_router
from .core.config import get_settings
from .core.logging_utils import configure_logging, get_logger, parse_level
from .models.base import BaseModelConfig

logger = get_logger(__name__)


class APIInfo(BaseModelConfig):
    """Root endpoint payload."""

    name: str = Field(...)
    version: str = Field(...)
    status: str = Field(...)
    environment: str = Field(...)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    # Startup
    settings = get_settings()
    configure_logging(level=settings.log_level)
    get_logger(level=parse_level(settings.log_level))
    logger.info("Starting %s in %s mode", settings.app_name, settings.api_env)

    init_app_state(app.state, settings)
    logger.info(
        "Rate table ready with %d entries", app.state.rate_table.entry_count
    )

    yield

    # Shutdown
    logger.info(
        "Shutting down %s, %d quotes issued",
        settings.app_name,
        len(app.state.quote_repository),
    )


@beartype
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Rating, eligibility and quoting for commercial insurance lines",
        version=settings.api_version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # Include API routers
    app.include_router(v1_router)

    # Root endpoint
    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name=settings.app_name,
            version=settings.api_version,
            status="operational",
            environment=settings.api_env,
        )

    return app


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()

    uvicorn.run(
        "quote_engine.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
