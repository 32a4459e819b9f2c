"""API routers for the RVU engine."""

from rvu_engine.api.rvu import router as rvu_router
from rvu_engine.api.stats import router as stats_router

__all__ = [
    "rvu_router",
    "stats_router",
]
