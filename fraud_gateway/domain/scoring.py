"""Risk aggregation and decision classification - core scoring logic"""

from typing import List

from fraud_gateway.domain.config import DetectionConfig, RiskThresholds
from fraud_gateway.domain.models import (
    FraudIndicator,
    Recommendation,
    RiskLevel,
    Severity,
    UserRiskProfile,
)
from fraud_gateway.domain.rules import indicator_points

PROFILE_WEIGHT = 0.3
ANOMALY_BASELINE_SCORE = 25.0
ANOMALY_MAX_ADJUSTMENT = 0.5
NEUTRAL_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99


def clamp_score(score: float) -> float:
    return min(max(score, 0.0), 100.0)


def anomaly_adjustment(indicators: List[FraudIndicator], profile: UserRiskProfile) -> float:
    """
    Multiplicative boost applied when anomaly detection is enabled.

    Grows 0.1 per indicator plus the profile's distance from a baseline
    score of 25, capped at 0.5.
    """
    indicator_component = 0.1 * len(indicators)
    profile_deviation = abs(profile.risk_score - ANOMALY_BASELINE_SCORE) / 100
    return min(indicator_component + profile_deviation, ANOMALY_MAX_ADJUSTMENT)


def calculate_risk_score(
    indicators: List[FraudIndicator],
    profile: UserRiskProfile,
    config: DetectionConfig,
) -> float:
    """
    Aggregate score from 0 (no risk) to 100 (certain fraud).

    score = 30% of the profile's standing score
          + sum(weight * confidence * severity multiplier) over all indicators

    Indicators of the same type all accumulate.
    """
    score = profile.risk_score * PROFILE_WEIGHT
    score += sum(indicator_points(indicator) for indicator in indicators)

    if config.enable_anomaly_detection:
        score *= 1 + anomaly_adjustment(indicators, profile)

    return clamp_score(score)


def calculate_confidence(indicators: List[FraudIndicator]) -> float:
    """Mean indicator confidence, raised 10% per distinct indicator type"""
    if not indicators:
        return NEUTRAL_CONFIDENCE

    average = sum(i.confidence for i in indicators) / len(indicators)
    variety = len({i.type for i in indicators})
    return min(average * (1 + variety * 0.1), MAX_CONFIDENCE)


def determine_risk_level(score: float, thresholds: RiskThresholds) -> RiskLevel:
    if score >= thresholds.critical:
        return RiskLevel.CRITICAL
    elif score >= thresholds.high:
        return RiskLevel.HIGH
    elif score >= thresholds.medium:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def generate_recommendation(
    score: float,
    indicators: List[FraudIndicator],
    thresholds: RiskThresholds,
) -> Recommendation:
    """
    Map score to an action. A critical indicator never lets a low score
    through as approve or review.
    """
    if score >= thresholds.critical:
        return Recommendation.BLOCK
    if score >= thresholds.high:
        return Recommendation.INVESTIGATE
    if any(i.severity == Severity.CRITICAL for i in indicators):
        return Recommendation.INVESTIGATE
    if score >= thresholds.medium:
        return Recommendation.REVIEW
    return Recommendation.APPROVE
