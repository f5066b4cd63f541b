"""GET /v1/users/{user_id}/risk - Fetch a user's risk summary"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from fraud_gateway.api.v1.schemas import RiskSummaryResponse
from fraud_gateway.api.dependencies import get_engine, get_request_id
from fraud_gateway.domain.exceptions import StorageError
from fraud_gateway.services.engine import FraudDetectionEngine

router = APIRouter()


@router.get("/users/{user_id}/risk", response_model=RiskSummaryResponse)
async def get_user_risk_summary(
    user_id: str,
    request: Request,
    engine: FraudDetectionEngine = Depends(get_engine),
):
    """
    Retrieve the user's current risk profile.

    A profile is bootstrapped from account and transaction history when
    the user has never been analyzed.
    """
    try:
        profile = await engine.get_user_risk_summary(user_id)
    except StorageError as e:
        logging.error(f"Risk summary failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Risk profile store unavailable")

    return RiskSummaryResponse.from_profile(profile)
