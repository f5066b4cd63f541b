"""Geolocation detector: new countries and impossible travel"""

from typing import List

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.utils.date_utils import ensure_utc, hours_between, trailing_window

RECENT_ACTIVITY_HOURS = 2
IMPOSSIBLE_TRAVEL_HOURS = 4


async def detect_geolocation(ctx: DetectionContext) -> List[FraudIndicator]:
    txn = ctx.transaction
    country = txn.source.country
    if not country:
        return []

    indicators = []
    observed = ctx.profile.historical_analysis.geolocation_patterns

    if observed and country not in observed:
        high_risk = country in ctx.config.behavior.high_risk_countries
        indicators.append(
            build_indicator(
                "geolocation_high_risk_country" if high_risk else "geolocation_new_country",
                f"Transaction from new location: {country}",
                {"current_country": country, "typical_countries": observed, "high_risk_country": high_risk},
            )
        )

    now = ensure_utc(txn.timestamp)
    start, end = trailing_window(now, RECENT_ACTIVITY_HOURS)
    recent = await ctx.history.list_transactions(txn.user_id, start, end)

    if recent:
        last = recent[0]
        if last.country and last.country != country:
            gap = hours_between(last.timestamp, now)
            if gap < IMPOSSIBLE_TRAVEL_HOURS:
                indicators.append(
                    build_indicator(
                        "geolocation_impossible_travel",
                        f"Impossible travel: {last.country} to {country} in {round(gap)} hours",
                        {"previous_country": last.country, "current_country": country, "time_gap": gap},
                    )
                )

    return indicators
