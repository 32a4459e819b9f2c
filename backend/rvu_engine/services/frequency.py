"""Code frequency and profitability aggregation.

Groups a user's historical code rows by code identity and ranks the groups
by how often they were billed and by how much revenue they produced.

Grouping is on the exact code string (case-sensitive): "99213" and
"99213 " are different codes. Ranking ties always resolve to the group that
appeared first in the input.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from rvu_engine.services.records import (
    CodeRecord,
    coerce_code_record,
    normalize_category,
    round_half_up,
    validate_rate,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 10


@dataclass
class CodeAccumulator:
    """Running totals for one code identity."""

    code: str
    description: str
    category: str
    count: int = 0
    total_rvu: float = 0.0

    def add(self, record: CodeRecord) -> None:
        self.count += 1
        self.total_rvu += record.rvu

    @property
    def average_rvu(self) -> float:
        return self.total_rvu / self.count if self.count else 0.0


@dataclass(frozen=True)
class FrequencyEntry:
    """A ranked code group."""

    code: str
    description: str
    category: str
    count: int
    total_rvu: float
    average_rvu: float
    total_revenue: float


@dataclass(frozen=True)
class CategoryTotal:
    """Count and RVU totals for one category."""

    category: str
    count: int
    total_rvu: float


@dataclass(frozen=True)
class FrequencyReport:
    """All frequency/profitability rankings for one snapshot."""

    total_procedure_count: int = 0
    unique_code_count: int = 0
    most_frequent: list[FrequencyEntry] = field(default_factory=list)
    most_profitable: list[FrequencyEntry] = field(default_factory=list)
    least_profitable: list[FrequencyEntry] = field(default_factory=list)
    by_category: list[CategoryTotal] = field(default_factory=list)


def _check_top_k(top_k: int | None) -> None:
    if top_k is not None and top_k < 0:
        raise ValueError(f"top_k must be non-negative, got {top_k}")


def _limit(items: list, top_k: int | None) -> list:
    return list(items) if top_k is None else items[:top_k]


def group_by_code(code_records: Iterable[Any]) -> dict[str, CodeAccumulator]:
    """Group code rows by code identity, preserving first-seen order.

    The description and category of a group come from its first row.
    """
    groups: dict[str, CodeAccumulator] = {}
    for item in code_records:
        record = coerce_code_record(item)
        group = groups.get(record.code)
        if group is None:
            group = CodeAccumulator(
                code=record.code,
                description=record.description,
                category=normalize_category(record.category),
            )
            groups[record.code] = group
        group.add(record)
    return groups


def _to_entry(group: CodeAccumulator, rate_per_rvu: float) -> FrequencyEntry:
    return FrequencyEntry(
        code=group.code,
        description=group.description,
        category=group.category,
        count=group.count,
        total_rvu=round_half_up(group.total_rvu),
        average_rvu=round_half_up(group.average_rvu),
        total_revenue=round_half_up(group.total_rvu * rate_per_rvu),
    )


def rank_most_frequent(
    groups: dict[str, CodeAccumulator],
    rate_per_rvu: float,
    top_k: int | None = DEFAULT_TOP_K,
) -> list[FrequencyEntry]:
    """Groups by descending count."""
    _check_top_k(top_k)
    entries = [_to_entry(g, rate_per_rvu) for g in groups.values()]
    return _limit(sorted(entries, key=lambda e: e.count, reverse=True), top_k)


def summarize_categories(code_records: Iterable[Any]) -> list[CategoryTotal]:
    """Count and RVU totals per category, largest count first.

    Each row is attributed to its own category; blank categories land in
    "Other".
    """
    counts: dict[str, int] = {}
    rvus: dict[str, float] = {}
    for item in code_records:
        record = coerce_code_record(item)
        category = normalize_category(record.category)
        counts[category] = counts.get(category, 0) + 1
        rvus[category] = rvus.get(category, 0.0) + record.rvu

    totals = [
        CategoryTotal(category=name, count=counts[name], total_rvu=round_half_up(rvus[name]))
        for name in counts
    ]
    return sorted(totals, key=lambda t: t.count, reverse=True)


def aggregate_code_frequency(
    code_records: Iterable[Any],
    rate_per_rvu: float,
    top_k: int | None = DEFAULT_TOP_K,
) -> FrequencyReport:
    """Build the frequency and profitability rankings.

    Args:
        code_records: Historical code rows (CodeRecord, objects or mappings).
        rate_per_rvu: Currency per RVU used for profitability (>= 0).
        top_k: Maximum entries per ranking; None returns every group.

    Returns:
        FrequencyReport. ``least_profitable`` only contains codes billed
        more than once.

    Raises:
        InvalidRateError: If rate_per_rvu is negative or not finite.
        NegativeRVUError: If any row carries a negative RVU.
        ValueError: If top_k is negative.
    """
    validate_rate(rate_per_rvu)
    _check_top_k(top_k)

    records = [coerce_code_record(item) for item in code_records]
    groups = group_by_code(records)
    entries = [_to_entry(g, rate_per_rvu) for g in groups.values()]

    most_frequent = sorted(entries, key=lambda e: e.count, reverse=True)
    most_profitable = sorted(entries, key=lambda e: e.total_revenue, reverse=True)
    least_profitable = sorted(
        (e for e in entries if e.count > 1),
        key=lambda e: e.total_revenue,
    )

    logger.debug(f"Aggregated {len(records)} code rows into {len(groups)} groups")

    return FrequencyReport(
        total_procedure_count=len(records),
        unique_code_count=len(groups),
        most_frequent=_limit(most_frequent, top_k),
        most_profitable=_limit(most_profitable, top_k),
        least_profitable=_limit(least_profitable, top_k),
        by_category=summarize_categories(records),
    )
