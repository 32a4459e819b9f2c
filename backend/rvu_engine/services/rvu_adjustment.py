"""Multiple Procedure Payment Reduction (MPPR) calculator.

When several procedures are billed for the same session, the highest-RVU
procedure is paid at 100% and every other procedure at 50%:

- Highest RVU procedure: 100% payment
- Second highest RVU procedure: 50% payment
- Third and subsequent procedures: 50% payment

Ties on RVU keep the order the codes were supplied in, so the first of
several equally weighted codes is the primary procedure.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from rvu_engine.services.records import BilledCode, coerce_billed_code, round_half_up, validate_rate

logger = logging.getLogger(__name__)

PRIMARY_FACTOR = 1.0
ADDITIONAL_FACTOR = 0.5


@dataclass(frozen=True)
class AdjustmentEntry:
    """One code's line in the MPPR breakdown."""

    code: str
    description: str
    original_rvu: float
    adjustment_factor: float
    adjustment_description: str
    adjusted_rvu: float
    position: int  # 1-based rank by descending RVU


@dataclass(frozen=True)
class AdjustmentResult:
    """Totals and per-code breakdown after MPPR."""

    total_adjusted_rvu: float = 0.0
    unadjusted_total: float = 0.0
    reduction_amount: float = 0.0
    breakdown: list[AdjustmentEntry] = field(default_factory=list)


def calculate_adjusted_rvus(codes: Iterable[Any]) -> AdjustmentResult:
    """Calculate total RVUs with the MPPR step-down applied.

    Args:
        codes: Codes billed together. Each item is a BilledCode, any object
            with ``code``/``rvu``/``description`` attributes, or a mapping
            with those keys.

    Returns:
        AdjustmentResult with rounded totals and the ranked breakdown.
        Empty input yields all-zero totals and an empty breakdown.

    Raises:
        NegativeRVUError: If any code carries a negative RVU.
    """
    billed: list[BilledCode] = [coerce_billed_code(item) for item in codes]
    if not billed:
        return AdjustmentResult()

    ranked = sorted(billed, key=lambda c: c.rvu, reverse=True)

    breakdown: list[AdjustmentEntry] = []
    for index, code in enumerate(ranked):
        if index == 0:
            factor = PRIMARY_FACTOR
            description = "Primary procedure (100%)"
        else:
            factor = ADDITIONAL_FACTOR
            description = "Additional procedure (50%)"

        breakdown.append(AdjustmentEntry(
            code=code.code,
            description=code.description,
            original_rvu=code.rvu,
            adjustment_factor=factor,
            adjustment_description=description,
            adjusted_rvu=code.rvu * factor,
            position=index + 1,
        ))

    unadjusted_total = sum(code.rvu for code in billed)
    total_adjusted = sum(entry.adjusted_rvu for entry in breakdown)

    logger.debug(
        f"MPPR applied to {len(breakdown)} codes: "
        f"{unadjusted_total:.2f} -> {total_adjusted:.2f} RVU"
    )

    return AdjustmentResult(
        total_adjusted_rvu=round_half_up(total_adjusted),
        unadjusted_total=round_half_up(unadjusted_total),
        reduction_amount=round_half_up(unadjusted_total - total_adjusted),
        breakdown=breakdown,
    )


def calculate_adjusted_value(codes: Iterable[Any], rate_per_rvu: float) -> float:
    """Estimate reimbursement for co-billed codes after MPPR.

    Args:
        codes: Codes billed together (see calculate_adjusted_rvus).
        rate_per_rvu: Currency amount paid per RVU (must be >= 0).

    Returns:
        Adjusted RVU total times the rate, rounded to 2 decimals.

    Raises:
        InvalidRateError: If rate_per_rvu is negative or not finite.
    """
    validate_rate(rate_per_rvu)
    result = calculate_adjusted_rvus(codes)
    return round_half_up(result.total_adjusted_rvu * rate_per_rvu)
