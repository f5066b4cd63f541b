"""POST /v1/analysis and GET /v1/analysis/{transaction_id} - transaction risk scoring endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from fraud_gateway.api.v1.schemas import AnalysisRequest, AnalysisResponse
from fraud_gateway.api.dependencies import get_engine, get_request_id
from fraud_gateway.config import settings
from fraud_gateway.domain.exceptions import InvalidTransactionError, StorageError
from fraud_gateway.services.engine import FraudDetectionEngine

router = APIRouter()


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze_transaction(
    request_body: AnalysisRequest,
    request: Request,
    engine: FraudDetectionEngine = Depends(get_engine),
):
    """
    Score a transaction attempt before funds move.

    Always answers with a decision: internal failures degrade to a
    `review` recommendation instead of an error response.
    """
    request_id = get_request_id(request)

    try:
        result = await engine.analyze(
            request_body.to_context(),
            request_id=request_id,
            timeout=settings.analysis_timeout_seconds,
        )
    except InvalidTransactionError as e:
        logging.warning(f"Invalid transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    return AnalysisResponse.from_result(result)


@router.get("/analysis/{transaction_id}", response_model=AnalysisResponse)
async def get_analysis(
    transaction_id: str,
    request: Request,
    engine: FraudDetectionEngine = Depends(get_engine),
):
    """Retrieve the stored analysis for a transaction"""
    try:
        result = await engine.get_analysis(transaction_id)
    except StorageError as e:
        logging.error(f"Analysis lookup failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Analysis store unavailable")

    if result is None:
        raise HTTPException(status_code=404, detail="Analysis not found")

    return AnalysisResponse.from_result(result)
