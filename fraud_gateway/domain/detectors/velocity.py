"""Velocity detector: transaction count and volume in trailing windows"""

from datetime import timedelta
from typing import List

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.utils.date_utils import ensure_utc, trailing_window


async def detect_velocity(ctx: DetectionContext) -> List[FraudIndicator]:
    """
    Compare the user's last hour and last 24 hours of confirmed activity
    against the configured velocity thresholds.

    A single 24h query is made; the hourly figures are derived from it.
    """
    thresholds = ctx.config.velocity
    now = ensure_utc(ctx.transaction.timestamp)
    day_start, day_end = trailing_window(now, 24)
    daily = await ctx.history.list_transactions(ctx.transaction.user_id, day_start, day_end)

    hour_start = now - timedelta(hours=1)
    hourly = [t for t in daily if ensure_utc(t.timestamp) >= hour_start]

    hourly_count = len(hourly)
    hourly_amount = sum(t.amount for t in hourly)
    daily_amount = sum(t.amount for t in daily)

    indicators = []

    if hourly_count > thresholds.max_transactions_per_hour:
        indicators.append(
            build_indicator(
                "velocity_hourly_count",
                f"Excessive transaction frequency: {hourly_count} transactions in 1 hour",
                {"hourly_count": hourly_count, "threshold": thresholds.max_transactions_per_hour},
            )
        )

    if hourly_amount > thresholds.max_amount_per_hour:
        indicators.append(
            build_indicator(
                "velocity_hourly_amount",
                f"Excessive transaction amount: {hourly_amount / 100:.2f} in 1 hour",
                {"hourly_amount": hourly_amount, "threshold": thresholds.max_amount_per_hour},
            )
        )

    if daily_amount > thresholds.max_amount_per_day:
        indicators.append(
            build_indicator(
                "velocity_daily_amount",
                f"High daily transaction volume: {daily_amount / 100:.2f}",
                {"daily_amount": daily_amount, "threshold": thresholds.max_amount_per_day},
            )
        )

    baseline = ctx.profile.historical_analysis
    average_hourly_amount = baseline.average_transaction_amount * baseline.transaction_frequency
    if average_hourly_amount > 0 and hourly_amount > average_hourly_amount * thresholds.spike_multiplier:
        indicators.append(
            build_indicator(
                "velocity_spike",
                f"Transaction velocity spike: {round(hourly_amount / average_hourly_amount)}x normal",
                {"current_amount": hourly_amount, "historical_average": average_hourly_amount},
            )
        )

    return indicators
