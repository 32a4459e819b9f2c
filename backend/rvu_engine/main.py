"""FastAPI application for the RVU analytics engine."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI

from rvu_engine import __version__
from rvu_engine.api import rvu_router, stats_router
from rvu_engine.core.config import settings
from rvu_engine.core.logging_config import configure_logging
from rvu_engine.services.statistics import get_statistics_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and builds the statistics service singleton so the
    first request does not pay for it.
    """
    configure_logging(settings.log_level.upper(), structured=settings.structured_logging)

    service = get_statistics_service()
    app.state.service_stats = service.get_stats()
    logger.info(
        f"Statistics service ready: rate {service.rate_per_rvu}/RVU, "
        f"top {service.config.top_k} codes"
    )

    yield


app = FastAPI(
    title=settings.app_name,
    description="Multiple procedure payment reduction and RVU statistics over billing snapshots.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(rvu_router, prefix=settings.api_prefix)
app.include_router(stats_router, prefix=settings.api_prefix)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe)."""
    return {
        "status": "healthy",
        "service": "rvu-analytics-engine",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "RVU Analytics Engine API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
