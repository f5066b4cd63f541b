"""User risk profile bootstrap and exponential smoothing"""

from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from fraud_gateway.domain.config import RiskThresholds
from fraud_gateway.domain.models import (
    AccountSnapshot,
    HistoricalAnalysis,
    HistoricalTransaction,
    RiskFactors,
    UserRiskProfile,
)
from fraud_gateway.domain.scoring import clamp_score, determine_risk_level
from fraud_gateway.utils.date_utils import ensure_utc

DEFAULT_AVERAGE_AMOUNT = 5000.0  # 50.00
MAX_PREFERRED_METHODS = 3
TYPICAL_HOUR_SHARE = 0.1
SMOOTHING_RETAIN = 0.7
ACCOUNT_AGE_FULL_DAYS = 30  # accounts this old score 100 on the age factor

FACTOR_WEIGHTS: Dict[str, float] = {
    "account_age": 0.2,
    "transaction_history": 0.3,
    "verification_level": 0.25,
    "behavioral_consistency": 0.15,
    "network_reputation": 0.1,
}


def analyze_transaction_history(transactions: List[HistoricalTransaction]) -> HistoricalAnalysis:
    """
    Summarise confirmed transactions into a behavioral baseline.

    - Preferred methods: up to 3, most frequent first
    - Typical hours: hours (UTC) seen in at least 10% of transactions
    - Countries: every distinct country observed, first seen first
    """
    if not transactions:
        return HistoricalAnalysis(average_transaction_amount=DEFAULT_AVERAGE_AMOUNT, transaction_frequency=0)

    average_amount = sum(t.amount for t in transactions) / len(transactions)

    method_counts = Counter(t.payment_method for t in transactions if t.payment_method)
    preferred_methods = [method for method, _ in method_counts.most_common(MAX_PREFERRED_METHODS)]

    hour_counts = Counter(ensure_utc(t.timestamp).hour for t in transactions)
    min_hour_count = max(1, len(transactions) * TYPICAL_HOUR_SHARE)
    typical_hours = sorted(hour for hour, count in hour_counts.items() if count >= min_hour_count)

    countries = list(dict.fromkeys(t.country for t in transactions if t.country))

    return HistoricalAnalysis(
        average_transaction_amount=average_amount,
        transaction_frequency=len(transactions),
        preferred_payment_methods=preferred_methods,
        typical_transaction_hours=typical_hours,
        geolocation_patterns=countries,
    )


def calculate_factors(
    account: Optional[AccountSnapshot],
    transaction_count: int,
    now: datetime,
) -> RiskFactors:
    account_age_days = 0.0
    if account is not None and account.created_at is not None:
        account_age_days = max((now - ensure_utc(account.created_at)).total_seconds() / 86400, 0.0)

    verified = account is not None and account.kyc_status == "approved"

    return RiskFactors(
        account_age=min(account_age_days / ACCOUNT_AGE_FULL_DAYS * 100, 100.0),
        transaction_history=min(transaction_count * 10, 100.0),
        verification_level=100.0 if verified else 0.0,
    )


def calculate_base_risk_score(factors: RiskFactors) -> float:
    """Each factor's shortfall from 100 counts toward risk, weighted"""
    score = sum((100 - getattr(factors, name)) * weight for name, weight in FACTOR_WEIGHTS.items())
    return clamp_score(score)


def build_profile(
    user_id: str,
    account: Optional[AccountSnapshot],
    transactions: List[HistoricalTransaction],
    thresholds: RiskThresholds,
    now: datetime,
) -> UserRiskProfile:
    """Create the initial profile for a user seen for the first time"""
    factors = calculate_factors(account, len(transactions), now)
    score = calculate_base_risk_score(factors)

    return UserRiskProfile(
        user_id=user_id,
        risk_score=score,
        risk_level=determine_risk_level(score, thresholds),
        factors=factors,
        historical_analysis=analyze_transaction_history(transactions),
        last_updated=now,
    )


def smooth_profile(
    profile: UserRiskProfile,
    new_score: float,
    thresholds: RiskThresholds,
    now: datetime,
) -> UserRiskProfile:
    """Fold a new analysis score into the profile (70% old, 30% new)"""
    score = clamp_score(profile.risk_score * SMOOTHING_RETAIN + new_score * (1 - SMOOTHING_RETAIN))
    return replace(
        profile,
        risk_score=score,
        risk_level=determine_risk_level(score, thresholds),
        last_updated=now,
    )
