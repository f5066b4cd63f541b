"""Behavioral detector: deviation from the user's historical baseline"""

from typing import List

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator, TransactionType
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.utils.date_utils import ensure_utc, hour_distance


def amount_ratio(amount: int, average_amount: float) -> float:
    """Current amount relative to the historical average (0 when there is no average)"""
    if average_amount <= 0:
        return 0.0
    return amount / average_amount


async def detect_behavioral(ctx: DetectionContext) -> List[FraudIndicator]:
    txn = ctx.transaction
    baseline = ctx.profile.historical_analysis
    thresholds = ctx.config.behavior
    indicators = []

    ratio = amount_ratio(txn.amount, baseline.average_transaction_amount)
    if ratio > thresholds.suspicious_amount_multiplier:
        rule = (
            "behavioral_amount_critical"
            if ratio > thresholds.critical_amount_ratio
            else "behavioral_amount_high"
        )
        indicators.append(
            build_indicator(
                rule,
                f"Unusual transaction amount: {round(ratio)}x typical amount",
                {
                    "current_amount": txn.amount,
                    "typical_amount": baseline.average_transaction_amount,
                    "ratio": ratio,
                },
            )
        )

    preferred = baseline.preferred_payment_methods
    if preferred and txn.payment.method not in preferred:
        indicators.append(
            build_indicator(
                "behavioral_payment_method",
                f"Unusual payment method: {txn.payment.method}",
                {"current_method": txn.payment.method, "preferred_methods": preferred[:3]},
            )
        )

    current_hour = ensure_utc(txn.timestamp).hour
    typical_hours = baseline.typical_transaction_hours
    if typical_hours and not any(
        hour_distance(hour, current_hour) <= thresholds.typical_hour_tolerance for hour in typical_hours
    ):
        indicators.append(
            build_indicator(
                "temporal_unusual_hour",
                f"Unusual transaction time: {current_hour}:00",
                {"current_hour": current_hour, "typical_hours": typical_hours},
            )
        )

    if (
        txn.type == TransactionType.WITHDRAWAL
        and baseline.transaction_frequency < thresholds.min_history_for_withdrawal
    ):
        indicators.append(
            build_indicator(
                "behavioral_new_user_withdrawal",
                "Withdrawal attempt by new user with limited history",
                {"transaction_type": txn.type.value, "user_history": baseline.transaction_frequency},
            )
        )

    return indicators
