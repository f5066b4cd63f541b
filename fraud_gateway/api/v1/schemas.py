"""Pydantic schemas for API request/response validation"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from fraud_gateway.domain.models import (
    FraudAnalysisResult,
    IndicatorType,
    PaymentDescriptor,
    Recommendation,
    RiskLevel,
    Severity,
    TransactionContext,
    TransactionSource,
    TransactionType,
    UserRiskProfile,
)
from fraud_gateway.utils.date_utils import ensure_utc


class SourceSchema(BaseModel):
    ip: str = Field(..., min_length=1)
    country: Optional[str] = Field(None, min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    device: Optional[str] = None
    user_agent: Optional[str] = None


class PaymentSchema(BaseModel):
    method: str = Field(..., min_length=1)
    card_fingerprint: Optional[str] = None
    bank_account: Optional[str] = None
    digital_wallet: Optional[str] = None


class AnalysisRequest(BaseModel):
    """Request body for POST /v1/analysis"""

    transaction_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1, description="User identifier")
    amount: int = Field(..., gt=0, description="Amount in minor currency units")
    currency: str = Field("EUR", min_length=3, max_length=3)
    type: TransactionType
    source: SourceSchema
    payment: PaymentSchema
    timestamp: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_context(self) -> TransactionContext:
        timestamp = ensure_utc(self.timestamp) if self.timestamp else datetime.now(timezone.utc)
        return TransactionContext(
            transaction_id=self.transaction_id,
            user_id=self.user_id,
            amount=self.amount,
            currency=self.currency.upper(),
            type=self.type,
            source=TransactionSource(
                ip=self.source.ip,
                country=self.source.country.upper() if self.source.country else None,
                device=self.source.device,
                user_agent=self.source.user_agent,
            ),
            payment=PaymentDescriptor(
                method=self.payment.method,
                card_fingerprint=self.payment.card_fingerprint,
                bank_account=self.payment.bank_account,
                digital_wallet=self.payment.digital_wallet,
            ),
            timestamp=timestamp,
            metadata=dict(self.metadata),
        )


class IndicatorSchema(BaseModel):
    type: IndicatorType
    severity: Severity
    description: str
    evidence: Dict[str, Any]
    confidence: float
    weight: int
    rule: str


class AnalysisMetadataSchema(BaseModel):
    analysis_timestamp: datetime
    model_version: str
    processing_time_ms: float


class AnalysisResponse(BaseModel):
    """Response for POST /v1/analysis and GET /v1/analysis/{transaction_id}"""

    transaction_id: str
    user_id: str
    risk_score: float
    risk_level: RiskLevel
    recommendation: Recommendation
    confidence: float
    indicators: List[IndicatorSchema]
    metadata: AnalysisMetadataSchema

    @classmethod
    def from_result(cls, result: FraudAnalysisResult) -> "AnalysisResponse":
        return cls(
            transaction_id=result.transaction_id,
            user_id=result.user_id,
            risk_score=result.risk_score,
            risk_level=result.risk_level,
            recommendation=result.recommendation,
            confidence=result.confidence,
            indicators=[
                IndicatorSchema(
                    type=i.type,
                    severity=i.severity,
                    description=i.description,
                    evidence=i.evidence,
                    confidence=i.confidence,
                    weight=i.weight,
                    rule=i.rule,
                )
                for i in result.indicators
            ],
            metadata=AnalysisMetadataSchema(
                analysis_timestamp=result.metadata.analysis_timestamp,
                model_version=result.metadata.model_version,
                processing_time_ms=result.metadata.processing_time_ms,
            ),
        )


class RiskFactorsSchema(BaseModel):
    account_age: float
    transaction_history: float
    verification_level: float
    behavioral_consistency: float
    network_reputation: float


class HistoricalAnalysisSchema(BaseModel):
    average_transaction_amount: float
    transaction_frequency: int
    preferred_payment_methods: List[str]
    typical_transaction_hours: List[int]
    geolocation_patterns: List[str]


class RiskSummaryResponse(BaseModel):
    """Response for GET /v1/users/{user_id}/risk"""

    user_id: str
    risk_score: float
    risk_level: RiskLevel
    factors: RiskFactorsSchema
    flags: List[str]
    last_updated: datetime
    historical_analysis: HistoricalAnalysisSchema

    @classmethod
    def from_profile(cls, profile: UserRiskProfile) -> "RiskSummaryResponse":
        factors = profile.factors
        baseline = profile.historical_analysis
        return cls(
            user_id=profile.user_id,
            risk_score=profile.risk_score,
            risk_level=profile.risk_level,
            factors=RiskFactorsSchema(
                account_age=factors.account_age,
                transaction_history=factors.transaction_history,
                verification_level=factors.verification_level,
                behavioral_consistency=factors.behavioral_consistency,
                network_reputation=factors.network_reputation,
            ),
            flags=list(profile.flags),
            last_updated=profile.last_updated,
            historical_analysis=HistoricalAnalysisSchema(
                average_transaction_amount=baseline.average_transaction_amount,
                transaction_frequency=baseline.transaction_frequency,
                preferred_payment_methods=list(baseline.preferred_payment_methods),
                typical_transaction_hours=list(baseline.typical_transaction_hours),
                geolocation_patterns=list(baseline.geolocation_patterns),
            ),
        )


class StatisticsResponse(BaseModel):
    """Response for GET /v1/statistics"""

    start: datetime
    end: datetime
    total_analyses: int
    risk_distribution: Dict[str, int]
    blocked_count: int
    false_positive_rate: float
