"""GET /v1/statistics - Aggregate fraud analysis statistics"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from fraud_gateway.api.v1.schemas import StatisticsResponse
from fraud_gateway.api.dependencies import get_engine, get_request_id
from fraud_gateway.domain.exceptions import StorageError
from fraud_gateway.services.engine import FraudDetectionEngine
from fraud_gateway.utils.date_utils import ensure_utc

router = APIRouter()


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    request: Request,
    start: datetime = Query(..., description="Range start (inclusive)"),
    end: datetime = Query(..., description="Range end (inclusive)"),
    engine: FraudDetectionEngine = Depends(get_engine),
):
    """
    Summarise stored analyses in a time range.

    Returns:
        Total analyses, count per risk level, and number of block recommendations
    """
    start, end = ensure_utc(start), ensure_utc(end)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")

    try:
        stats = await engine.get_statistics(start, end)
    except StorageError as e:
        logging.error(f"Statistics query failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Analysis store unavailable")

    return StatisticsResponse(
        start=start,
        end=end,
        total_analyses=stats.total_analyses,
        risk_distribution=stats.risk_distribution,
        blocked_count=stats.blocked_count,
        false_positive_rate=stats.false_positive_rate,
    )
