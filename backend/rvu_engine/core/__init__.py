"""Core configuration, errors and logging."""

from rvu_engine.core.config import Settings, settings
from rvu_engine.core.exceptions import (
    ContractViolationError,
    InvalidRateError,
    NegativeRVUError,
    RVUEngineError,
)
from rvu_engine.core.logging_config import configure_logging

__all__ = [
    # Config
    "Settings",
    "settings",
    # Errors
    "ContractViolationError",
    "InvalidRateError",
    "NegativeRVUError",
    "RVUEngineError",
    # Logging
    "configure_logging",
]
