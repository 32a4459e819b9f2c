"""Statistics facade for the display layer.

Composes the MPPR-independent aggregation pieces into the four views the
dashboard screens need:

- dashboard_summary: code counts, total RVU, short recent/top lists
- analytics_trends: weekly/monthly/yearly series with trend directions
- procedure_rankings: most used, most/least profitable, by category
- common_codes: most used and most recent codes

Each view takes the same snapshot and computes from scratch, so callers can
cache or compute them independently.
"""

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from rvu_engine.core.config import Settings, settings
from rvu_engine.services.frequency import (
    FrequencyEntry,
    FrequencyReport,
    aggregate_code_frequency,
    group_by_code,
    rank_most_frequent,
)
from rvu_engine.services.records import (
    CaseRecord,
    CodeRecord,
    coerce_cases,
    flatten_codes,
    round_half_up,
    validate_rate,
)
from rvu_engine.services.time_windows import (
    DateBasis,
    Granularity,
    WindowBucket,
    align_timestamp,
    bucketize_cases,
    local_date,
)
from rvu_engine.services.trends import Trend, TrendMetric, classify_bucket_trend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatisticsConfig:
    """Window sizes, comparison spans and list lengths for the views."""

    weekly_window_count: int = 12
    monthly_window_count: int = 12
    yearly_window_count: int = 3
    trend_compare_weeks: int = 4
    trend_compare_months: int = 1
    trend_compare_years: int = 1
    top_k: int = 10
    dashboard_list_size: int = 5
    recent_code_days: int = 7
    date_basis: DateBasis = DateBasis.CREATED_AT

    @classmethod
    def from_settings(cls, source: Settings) -> "StatisticsConfig":
        return cls(
            weekly_window_count=source.weekly_window_count,
            monthly_window_count=source.monthly_window_count,
            yearly_window_count=source.yearly_window_count,
            trend_compare_weeks=source.trend_compare_weeks,
            trend_compare_months=source.trend_compare_months,
            trend_compare_years=source.trend_compare_years,
            top_k=source.top_k,
            dashboard_list_size=source.dashboard_list_size,
            recent_code_days=source.recent_code_days,
        )


@dataclass(frozen=True)
class RecentCode:
    """A code row in a most-recent list."""

    code: str
    description: str
    rvu: float
    created_at: datetime
    billed_on: date


@dataclass(frozen=True)
class DashboardSummary:
    """Headline counts for the home screen."""

    total_codes: int = 0
    recent_codes_count: int = 0
    this_month_codes: int = 0
    total_rvu: float = 0.0
    unique_codes: int = 0
    recent_codes: list[RecentCode] = field(default_factory=list)
    top_codes: list[FrequencyEntry] = field(default_factory=list)


@dataclass(frozen=True)
class TrendSeries:
    """Buckets of one granularity and the direction they point."""

    granularity: Granularity
    buckets: list[WindowBucket]
    rvu_trend: Trend
    revenue_trend: Trend


@dataclass(frozen=True)
class AnalyticsTrends:
    """Totals plus weekly/monthly/yearly series."""

    total_rvu: float
    total_revenue: float
    case_count: int
    weekly: TrendSeries
    monthly: TrendSeries
    yearly: TrendSeries
    rvu_trend: Trend
    revenue_trend: Trend


@dataclass(frozen=True)
class CommonCodes:
    """Most used and most recently used codes."""

    most_used: list[FrequencyEntry] = field(default_factory=list)
    recent: list[RecentCode] = field(default_factory=list)
    total_unique_codes: int = 0


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now().astimezone()


def most_recent_codes(
    codes: Iterable[CodeRecord],
    limit: int,
    now: datetime,
) -> list[RecentCode]:
    """Newest code rows first; rows without a timestamp are left out."""
    dated = [
        (align_timestamp(code.created_at, now), code)
        for code in codes
        if code.created_at is not None
    ]
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [
        RecentCode(
            code=code.code,
            description=code.description,
            rvu=code.rvu,
            created_at=created_at,
            billed_on=local_date(created_at, now.tzinfo),
        )
        for created_at, code in dated[:limit]
    ]


class StatisticsService:
    """Builds the display views from a snapshot of a user's cases."""

    def __init__(
        self,
        rate_per_rvu: float | None = None,
        config: StatisticsConfig | None = None,
    ) -> None:
        """Initialize the statistics service.

        Args:
            rate_per_rvu: Currency per RVU; defaults to the configured rate.
            config: View sizing; defaults to values from settings.
        """
        if rate_per_rvu is None:
            rate_per_rvu = settings.default_rate_per_rvu
        self.rate_per_rvu = validate_rate(rate_per_rvu)
        self.config = config or StatisticsConfig.from_settings(settings)

    def _snapshot(self, cases: Iterable[Any]) -> list[CaseRecord]:
        snapshot = coerce_cases(cases)
        logger.debug(f"Computing view over {len(snapshot)} cases")
        return snapshot

    # ------------------------------------------------------------------
    # View 1: dashboard summary
    # ------------------------------------------------------------------

    def dashboard_summary(
        self,
        cases: Iterable[Any],
        now: datetime | None = None,
    ) -> DashboardSummary:
        """Code counts and total RVU.

        "Recent" is a trailing window of ``recent_code_days`` days ending now;
        "this month" is the calendar month to date.
        """
        now = _now(now)
        snapshot = self._snapshot(cases)
        codes = flatten_codes(snapshot)

        recent_start = now - timedelta(days=self.config.recent_code_days)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        recent_count = 0
        month_count = 0
        for code in codes:
            if code.created_at is None:
                continue
            created = align_timestamp(code.created_at, now)
            if created >= recent_start:
                recent_count += 1
            if created >= month_start:
                month_count += 1

        groups = group_by_code(codes)
        size = self.config.dashboard_list_size

        return DashboardSummary(
            total_codes=len(codes),
            recent_codes_count=recent_count,
            this_month_codes=month_count,
            total_rvu=round_half_up(sum(case.total_rvu for case in snapshot)),
            unique_codes=len(groups),
            recent_codes=most_recent_codes(codes, size, now),
            top_codes=rank_most_frequent(groups, self.rate_per_rvu, size),
        )

    # ------------------------------------------------------------------
    # View 2: analytics trends
    # ------------------------------------------------------------------

    def _series(
        self,
        snapshot: Sequence[CaseRecord],
        granularity: Granularity,
        window_count: int,
        compare_last_n: int,
        now: datetime,
    ) -> TrendSeries:
        buckets = bucketize_cases(
            snapshot,
            granularity,
            window_count=window_count,
            anchor=now,
            date_basis=self.config.date_basis,
        )
        return TrendSeries(
            granularity=granularity,
            buckets=buckets,
            rvu_trend=classify_bucket_trend(buckets, compare_last_n, TrendMetric.RVU),
            revenue_trend=classify_bucket_trend(buckets, compare_last_n, TrendMetric.REVENUE),
        )

    def analytics_trends(
        self,
        cases: Iterable[Any],
        now: datetime | None = None,
    ) -> AnalyticsTrends:
        """Totals and weekly/monthly/yearly series.

        The headline trends compare the last ``trend_compare_weeks`` weekly
        buckets with the ones before them. Totals include every case, even
        those that fall outside (or have no date for) the windows.
        """
        now = _now(now)
        snapshot = self._snapshot(cases)
        cfg = self.config

        weekly = self._series(
            snapshot, Granularity.WEEKLY, cfg.weekly_window_count, cfg.trend_compare_weeks, now
        )
        monthly = self._series(
            snapshot, Granularity.MONTHLY, cfg.monthly_window_count, cfg.trend_compare_months, now
        )
        yearly = self._series(
            snapshot, Granularity.YEARLY, cfg.yearly_window_count, cfg.trend_compare_years, now
        )

        return AnalyticsTrends(
            total_rvu=round_half_up(sum(case.total_rvu for case in snapshot)),
            total_revenue=round_half_up(sum(case.estimated_value for case in snapshot)),
            case_count=len(snapshot),
            weekly=weekly,
            monthly=monthly,
            yearly=yearly,
            rvu_trend=weekly.rvu_trend,
            revenue_trend=weekly.revenue_trend,
        )

    # ------------------------------------------------------------------
    # View 3: procedure rankings
    # ------------------------------------------------------------------

    def procedure_rankings(self, cases: Iterable[Any]) -> FrequencyReport:
        """Most used, most/least profitable and per-category totals."""
        codes = flatten_codes(self._snapshot(cases))
        return aggregate_code_frequency(codes, self.rate_per_rvu, self.config.top_k)

    # ------------------------------------------------------------------
    # View 4: common codes
    # ------------------------------------------------------------------

    def common_codes(
        self,
        cases: Iterable[Any],
        now: datetime | None = None,
    ) -> CommonCodes:
        """Most used codes and the most recently billed codes."""
        now = _now(now)
        codes = flatten_codes(self._snapshot(cases))
        groups = group_by_code(codes)
        return CommonCodes(
            most_used=rank_most_frequent(groups, self.rate_per_rvu, self.config.top_k),
            recent=most_recent_codes(codes, self.config.top_k, now),
            total_unique_codes=len(groups),
        )

    def get_stats(self) -> dict[str, Any]:
        """Get service configuration summary."""
        return {
            "rate_per_rvu": self.rate_per_rvu,
            "weekly_window_count": self.config.weekly_window_count,
            "monthly_window_count": self.config.monthly_window_count,
            "yearly_window_count": self.config.yearly_window_count,
            "top_k": self.config.top_k,
            "date_basis": self.config.date_basis.value,
        }


# ============================================================================
# Singleton
# ============================================================================

_statistics_service: StatisticsService | None = None
_statistics_lock = threading.Lock()


def get_statistics_service() -> StatisticsService:
    """Get the singleton StatisticsService configured from settings."""
    global _statistics_service
    if _statistics_service is None:
        with _statistics_lock:
            if _statistics_service is None:
                logger.info("Creating singleton StatisticsService instance")
                _statistics_service = StatisticsService()
    return _statistics_service


def reset_statistics_service() -> None:
    """Reset the singleton instance (for testing)."""
    global _statistics_service
    with _statistics_lock:
        _statistics_service = None
