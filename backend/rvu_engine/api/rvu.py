"""MPPR adjustment endpoint."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from rvu_engine.core.exceptions import ContractViolationError
from rvu_engine.schemas.billing import AdjustRequest
from rvu_engine.schemas.stats import AdjustResponse
from rvu_engine.services.rvu_adjustment import calculate_adjusted_rvus, calculate_adjusted_value

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rvu", tags=["RVU Adjustment"])


@router.post(
    "/adjust",
    response_model=AdjustResponse,
    summary="Apply the multiple procedure payment reduction",
    description="Ranks co-billed codes by RVU and pays the first at 100%, the rest at 50%.",
)
async def adjust_rvus(request: AdjustRequest) -> AdjustResponse:
    """Calculate the MPPR breakdown for codes billed in one session."""
    codes = [code.model_dump() for code in request.codes]
    try:
        result = calculate_adjusted_rvus(codes)
        estimated_value = None
        if request.rate_per_rvu is not None:
            estimated_value = calculate_adjusted_value(codes, request.rate_per_rvu)
    except ContractViolationError as e:
        logger.warning(f"Rejected adjustment request: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return AdjustResponse.model_validate({**asdict(result), "estimated_value": estimated_value})
