"""Pydantic schemas for the RVU engine API."""

from rvu_engine.schemas.billing import (
    AdjustRequest,
    BilledCodeIn,
    CaseRecordIn,
    CodeRecordIn,
    SnapshotRequest,
)
from rvu_engine.schemas.stats import (
    AdjustmentEntrySummary,
    AdjustResponse,
    AnalyticsTrendsResponse,
    CategoryTotalSummary,
    CommonCodesResponse,
    DashboardSummaryResponse,
    FrequencyEntrySummary,
    ProcedureRankingsResponse,
    RecentCodeSummary,
    StatsMetadata,
    TrendSeriesSummary,
    WindowBucketSummary,
)

__all__ = [
    # Requests
    "AdjustRequest",
    "BilledCodeIn",
    "CaseRecordIn",
    "CodeRecordIn",
    "SnapshotRequest",
    # Responses
    "AdjustmentEntrySummary",
    "AdjustResponse",
    "AnalyticsTrendsResponse",
    "CategoryTotalSummary",
    "CommonCodesResponse",
    "DashboardSummaryResponse",
    "FrequencyEntrySummary",
    "ProcedureRankingsResponse",
    "RecentCodeSummary",
    "StatsMetadata",
    "TrendSeriesSummary",
    "WindowBucketSummary",
]
