"""Domain exceptions for the RVU engine.

Exception hierarchy:
    RVUEngineError (base)
    └── ContractViolationError   → caller passed data the core refuses
        ├── NegativeRVUError     → negative rvu / total / value
        └── InvalidRateError     → negative or non-finite rate per RVU

Degenerate input (empty sequences, missing optional fields) is never an
error; only values that point at an upstream data defect are raised.
"""

from typing import Any


class RVUEngineError(Exception):
    """Base exception for all RVU engine errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (field, value, code)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with context for display."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class ContractViolationError(RVUEngineError, ValueError):
    """Raised when an input violates the engine's value contract."""


class NegativeRVUError(ContractViolationError):
    """Raised when an RVU (or RVU-derived amount) is negative."""

    def __init__(self, field_name: str, value: float, code: str | None = None):
        self.field_name = field_name
        self.value = value
        self.code = code
        context: dict[str, Any] = {"field": field_name, "value": value}
        if code is not None:
            context["code"] = code
        super().__init__(f"{field_name} must be non-negative", context)


class InvalidRateError(ContractViolationError):
    """Raised when the rate per RVU is negative or not finite."""

    def __init__(self, rate: float):
        self.rate = rate
        super().__init__("rate_per_rvu must be finite and non-negative", {"rate_per_rvu": rate})
