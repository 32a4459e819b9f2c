"""Response schemas for the statistics views."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from rvu_engine.services.time_windows import Granularity
from rvu_engine.services.trends import Trend


# ==============================================================================
# Shared Components
# ==============================================================================


class StatsMetadata(BaseModel):
    """Common metadata for all statistics views."""

    generated_at: datetime = Field(..., description="When this view was generated")
    rate_per_rvu: float = Field(..., description="Currency per RVU used for revenue figures")
    case_count: int = Field(..., description="Cases in the snapshot")


class FrequencyEntrySummary(BaseModel):
    """A ranked code group."""

    code: str
    description: str
    category: str
    count: int
    total_rvu: float
    average_rvu: float
    total_revenue: float


class RecentCodeSummary(BaseModel):
    """A recently billed code."""

    code: str
    description: str
    rvu: float
    created_at: datetime
    billed_on: date


# ==============================================================================
# MPPR
# ==============================================================================


class AdjustmentEntrySummary(BaseModel):
    """One line of the MPPR breakdown."""

    code: str
    description: str
    original_rvu: float
    adjustment_factor: float
    adjustment_description: str
    adjusted_rvu: float
    position: int = Field(..., description="1-based rank by descending RVU")


class AdjustResponse(BaseModel):
    """Response for POST /rvu/adjust."""

    total_adjusted_rvu: float
    unadjusted_total: float
    reduction_amount: float
    breakdown: list[AdjustmentEntrySummary] = Field(default_factory=list)
    estimated_value: float | None = Field(None, description="Adjusted total times the rate")

    model_config = {"from_attributes": True}


# ==============================================================================
# Views
# ==============================================================================


class DashboardSummaryResponse(BaseModel):
    """Response for POST /stats/dashboard."""

    metadata: StatsMetadata
    total_codes: int
    recent_codes_count: int = Field(..., description="Codes saved in the trailing recent window")
    this_month_codes: int = Field(..., description="Codes saved this calendar month")
    total_rvu: float
    unique_codes: int
    recent_codes: list[RecentCodeSummary] = Field(default_factory=list)
    top_codes: list[FrequencyEntrySummary] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class WindowBucketSummary(BaseModel):
    """Totals for one time window."""

    label: str
    start: date
    end: date
    rvu_sum: float
    revenue_sum: float
    case_count: int


class TrendSeriesSummary(BaseModel):
    """A bucket series and its direction."""

    granularity: Granularity
    buckets: list[WindowBucketSummary] = Field(default_factory=list)
    rvu_trend: Trend
    revenue_trend: Trend


class AnalyticsTrendsResponse(BaseModel):
    """Response for POST /stats/analytics."""

    metadata: StatsMetadata
    total_rvu: float
    total_revenue: float
    case_count: int
    weekly: TrendSeriesSummary
    monthly: TrendSeriesSummary
    yearly: TrendSeriesSummary
    rvu_trend: Trend
    revenue_trend: Trend

    model_config = {"from_attributes": True}


class CategoryTotalSummary(BaseModel):
    """Count and RVU per category."""

    category: str
    count: int
    total_rvu: float


class ProcedureRankingsResponse(BaseModel):
    """Response for POST /stats/procedures."""

    metadata: StatsMetadata
    total_procedure_count: int
    unique_code_count: int
    most_frequent: list[FrequencyEntrySummary] = Field(default_factory=list)
    most_profitable: list[FrequencyEntrySummary] = Field(default_factory=list)
    least_profitable: list[FrequencyEntrySummary] = Field(
        default_factory=list, description="Codes billed more than once, lowest revenue first"
    )
    by_category: list[CategoryTotalSummary] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class CommonCodesResponse(BaseModel):
    """Response for POST /stats/common."""

    metadata: StatsMetadata
    most_used: list[FrequencyEntrySummary] = Field(default_factory=list)
    recent: list[RecentCodeSummary] = Field(default_factory=list)
    total_unique_codes: int

    model_config = {"from_attributes": True}
