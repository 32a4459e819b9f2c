"""Statistics endpoints for the display layer.

Every endpoint receives the full snapshot of a user's cases in the request
body; nothing is fetched or stored here.
"""

import logging
from dataclasses import asdict
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException

from rvu_engine.core.exceptions import ContractViolationError
from rvu_engine.schemas.billing import SnapshotRequest
from rvu_engine.schemas.stats import (
    AnalyticsTrendsResponse,
    CommonCodesResponse,
    DashboardSummaryResponse,
    ProcedureRankingsResponse,
    StatsMetadata,
)
from rvu_engine.services.records import CaseRecord, coerce_cases
from rvu_engine.services.statistics import StatisticsService, get_statistics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["Statistics"])


# ==============================================================================
# Helper Functions
# ==============================================================================


def _service_for(request: SnapshotRequest) -> StatisticsService:
    """Shared service, or a per-request one when the rate is overridden."""
    service = get_statistics_service()
    if request.rate_per_rvu is None:
        return service
    return StatisticsService(rate_per_rvu=request.rate_per_rvu, config=service.config)


def _snapshot(request: SnapshotRequest) -> list[CaseRecord]:
    return coerce_cases(case.model_dump() for case in request.cases)


def _reject(error: ContractViolationError) -> HTTPException:
    logger.warning(f"Rejected snapshot: {error}")
    return HTTPException(status_code=422, detail=str(error))


def _metadata(service: StatisticsService, snapshot: list[CaseRecord]) -> StatsMetadata:
    return StatsMetadata(
        generated_at=datetime.now(UTC),
        rate_per_rvu=service.rate_per_rvu,
        case_count=len(snapshot),
    )


# ==============================================================================
# Views
# ==============================================================================


@router.post(
    "/dashboard",
    response_model=DashboardSummaryResponse,
    summary="Get dashboard summary counts",
)
async def get_dashboard_summary(request: SnapshotRequest) -> DashboardSummaryResponse:
    """Total, recent and this-month code counts plus total RVU."""
    service = _service_for(request)
    try:
        snapshot = _snapshot(request)
        summary = service.dashboard_summary(snapshot, now=request.now)
    except ContractViolationError as e:
        raise _reject(e)
    return DashboardSummaryResponse.model_validate(
        {**asdict(summary), "metadata": _metadata(service, snapshot)}
    )


@router.post(
    "/analytics",
    response_model=AnalyticsTrendsResponse,
    summary="Get weekly, monthly and yearly trends",
)
async def get_analytics_trends(request: SnapshotRequest) -> AnalyticsTrendsResponse:
    """RVU and revenue series with their trend directions."""
    service = _service_for(request)
    try:
        snapshot = _snapshot(request)
        trends = service.analytics_trends(snapshot, now=request.now)
    except ContractViolationError as e:
        raise _reject(e)
    return AnalyticsTrendsResponse.model_validate(
        {**asdict(trends), "metadata": _metadata(service, snapshot)}
    )


@router.post(
    "/procedures",
    response_model=ProcedureRankingsResponse,
    summary="Get procedure rankings",
)
async def get_procedure_rankings(request: SnapshotRequest) -> ProcedureRankingsResponse:
    """Most used, most/least profitable procedures and category totals."""
    service = _service_for(request)
    try:
        snapshot = _snapshot(request)
        report = service.procedure_rankings(snapshot)
    except ContractViolationError as e:
        raise _reject(e)
    return ProcedureRankingsResponse.model_validate(
        {**asdict(report), "metadata": _metadata(service, snapshot)}
    )


@router.post(
    "/common",
    response_model=CommonCodesResponse,
    summary="Get most used and most recent codes",
)
async def get_common_codes(request: SnapshotRequest) -> CommonCodesResponse:
    """Most frequently and most recently billed codes."""
    service = _service_for(request)
    try:
        snapshot = _snapshot(request)
        common = service.common_codes(snapshot, now=request.now)
    except ContractViolationError as e:
        raise _reject(e)
    return CommonCodesResponse.model_validate(
        {**asdict(common), "metadata": _metadata(service, snapshot)}
    )
