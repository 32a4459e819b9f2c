"""Services for the RVU engine.

Services implement the pure computations over billing snapshots:
- rvu_adjustment: Multiple Procedure Payment Reduction calculator
- frequency: code frequency / profitability rankings
- time_windows: weekly, monthly and yearly bucketing of cases
- trends: up/down/stable classification of bucket series
- statistics: facade composing the four display views
"""

from rvu_engine.services.frequency import (
    CategoryTotal,
    FrequencyEntry,
    FrequencyReport,
    aggregate_code_frequency,
)
from rvu_engine.services.records import (
    BilledCode,
    CaseRecord,
    CodeRecord,
    coerce_case_record,
    coerce_cases,
    coerce_code_record,
    round_half_up,
)
from rvu_engine.services.rvu_adjustment import (
    AdjustmentEntry,
    AdjustmentResult,
    calculate_adjusted_rvus,
    calculate_adjusted_value,
)
from rvu_engine.services.statistics import (
    AnalyticsTrends,
    CommonCodes,
    DashboardSummary,
    StatisticsConfig,
    StatisticsService,
    get_statistics_service,
    reset_statistics_service,
)
from rvu_engine.services.time_windows import (
    DateBasis,
    Granularity,
    WindowBucket,
    bucketize_cases,
    build_windows,
)
from rvu_engine.services.trends import Trend, TrendMetric, classify_bucket_trend, classify_trend

__all__ = [
    # Records
    "BilledCode",
    "CaseRecord",
    "CodeRecord",
    "coerce_case_record",
    "coerce_cases",
    "coerce_code_record",
    "round_half_up",
    # MPPR
    "AdjustmentEntry",
    "AdjustmentResult",
    "calculate_adjusted_rvus",
    "calculate_adjusted_value",
    # Frequency
    "CategoryTotal",
    "FrequencyEntry",
    "FrequencyReport",
    "aggregate_code_frequency",
    # Windows and trends
    "DateBasis",
    "Granularity",
    "WindowBucket",
    "bucketize_cases",
    "build_windows",
    "Trend",
    "TrendMetric",
    "classify_bucket_trend",
    "classify_trend",
    # Facade
    "AnalyticsTrends",
    "CommonCodes",
    "DashboardSummary",
    "StatisticsConfig",
    "StatisticsService",
    "get_statistics_service",
    "reset_statistics_service",
]
