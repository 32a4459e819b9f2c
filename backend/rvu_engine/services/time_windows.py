"""Time-window bucketing of historical cases.

Three granularities are supported:

- WEEKLY: fixed 7-day spans anchored to the call date (not calendar weeks).
  The most recent window starts on the anchor date itself.
- MONTHLY: full calendar months, 1st to last day.
- YEARLY: full calendar years.

All windows are date ranges inclusive on both ends and are returned oldest
first. Consecutive windows of one granularity touch without gaps or overlap.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

from rvu_engine.services.records import CaseRecord, coerce_case_record, round_half_up

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    """Bucket width."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DateBasis(str, Enum):
    """Which case date decides bucket membership."""

    CREATED_AT = "created_at"
    PROCEDURE_DATE = "procedure_date"


DEFAULT_WINDOW_COUNTS: dict[Granularity, int] = {
    Granularity.WEEKLY: 12,
    Granularity.MONTHLY: 12,
    Granularity.YEARLY: 3,
}


@dataclass(frozen=True)
class DateWindow:
    """An inclusive date range with its display label."""

    label: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class WindowBucket:
    """Aggregated case totals for one window."""

    label: str
    start: date
    end: date
    rvu_sum: float
    revenue_sum: float
    case_count: int


def _anchor_date(anchor: datetime | date | None) -> tuple[date, tzinfo | None]:
    if anchor is None:
        anchor = datetime.now().astimezone()
    if isinstance(anchor, datetime):
        return anchor.date(), anchor.tzinfo
    return anchor, None


def align_timestamp(timestamp: datetime, reference: datetime) -> datetime:
    """Make ``timestamp`` comparable with ``reference``.

    Naive timestamps are read as wall time in the reference's timezone;
    aware timestamps compared against a naive reference are converted to
    local wall time.
    """
    if reference.tzinfo is not None and timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and timestamp.tzinfo is not None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def local_date(timestamp: datetime, tz: tzinfo | None) -> date:
    """Calendar date of ``timestamp`` as seen from the anchor's timezone.

    A naive anchor stands for local wall time, so aware timestamps are
    converted to the local zone, as in align_timestamp.
    """
    if timestamp.tzinfo is None:
        return timestamp.date()
    if tz is None:
        return timestamp.astimezone().date()
    return timestamp.astimezone(tz).date()


def _weekly_window(anchor: date, offset: int) -> DateWindow:
    start = anchor - timedelta(days=7 * offset)
    end = start + timedelta(days=6)
    return DateWindow(label=f"{start.month}/{start.day}", start=start, end=end)


def _monthly_window(anchor: date, offset: int) -> DateWindow:
    start = anchor.replace(day=1) - relativedelta(months=offset)
    end = start + relativedelta(months=1, days=-1)
    return DateWindow(label=start.strftime("%b %Y"), start=start, end=end)


def _yearly_window(anchor: date, offset: int) -> DateWindow:
    start = anchor.replace(month=1, day=1) - relativedelta(years=offset)
    end = start + relativedelta(years=1, days=-1)
    return DateWindow(label=str(start.year), start=start, end=end)


_WINDOW_BUILDERS = {
    Granularity.WEEKLY: _weekly_window,
    Granularity.MONTHLY: _monthly_window,
    Granularity.YEARLY: _yearly_window,
}


def build_windows(
    granularity: Granularity,
    window_count: int | None = None,
    anchor: datetime | date | None = None,
) -> list[DateWindow]:
    """Build the date windows for a granularity, oldest first.

    Args:
        granularity: Window width.
        window_count: Number of windows (defaults per granularity).
        anchor: Reference point; defaults to now in the local timezone.

    Raises:
        ValueError: If window_count is less than 1.
    """
    granularity = Granularity(granularity)
    if window_count is None:
        window_count = DEFAULT_WINDOW_COUNTS[granularity]
    if window_count < 1:
        raise ValueError(f"window_count must be at least 1, got {window_count}")

    anchor_day, _ = _anchor_date(anchor)
    builder = _WINDOW_BUILDERS[granularity]
    return [builder(anchor_day, offset) for offset in range(window_count - 1, -1, -1)]


def qualifying_date(
    case: CaseRecord,
    basis: DateBasis = DateBasis.CREATED_AT,
    tz: tzinfo | None = None,
) -> date | None:
    """The date that places a case in a window, or None if it has none."""
    if DateBasis(basis) is DateBasis.PROCEDURE_DATE:
        return case.procedure_date
    if case.created_at is None:
        return None
    return local_date(case.created_at, tz)


def bucketize_cases(
    cases: Iterable[Any],
    granularity: Granularity,
    window_count: int | None = None,
    anchor: datetime | date | None = None,
    date_basis: DateBasis = DateBasis.CREATED_AT,
) -> list[WindowBucket]:
    """Partition cases into time windows and total each window.

    Cases without a qualifying date fall into no bucket. A case with no
    codes still counts toward ``case_count``.

    Returns:
        Exactly ``window_count`` buckets, oldest first, with rounded sums.
    """
    if anchor is None:
        anchor = datetime.now().astimezone()
    windows = build_windows(granularity, window_count, anchor)
    _, tz = _anchor_date(anchor)

    rvu_sums = [0.0] * len(windows)
    revenue_sums = [0.0] * len(windows)
    case_counts = [0] * len(windows)
    first, last = windows[0].start, windows[-1].end

    skipped = 0
    for item in cases:
        case = coerce_case_record(item)
        day = qualifying_date(case, date_basis, tz)
        if day is None:
            skipped += 1
            continue
        if not first <= day <= last:
            continue
        for index, window in enumerate(windows):
            if window.contains(day):
                rvu_sums[index] += case.total_rvu
                revenue_sums[index] += case.estimated_value
                case_counts[index] += 1
                break

    if skipped:
        logger.debug(f"{skipped} cases without a {DateBasis(date_basis).value} left out of buckets")

    return [
        WindowBucket(
            label=window.label,
            start=window.start,
            end=window.end,
            rvu_sum=round_half_up(rvu_sums[index]),
            revenue_sum=round_half_up(revenue_sums[index]),
            case_count=case_counts[index],
        )
        for index, window in enumerate(windows)
    ]
