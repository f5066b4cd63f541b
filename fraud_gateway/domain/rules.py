"""Indicator rule table: every weight and confidence a detector can emit lives here"""

from dataclasses import dataclass
from typing import Any, Dict

from fraud_gateway.domain.models import FraudIndicator, IndicatorType, Severity


@dataclass(frozen=True)
class IndicatorRule:
    type: IndicatorType
    severity: Severity
    weight: int
    confidence: float


SEVERITY_MULTIPLIER: Dict[Severity, int] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

INDICATOR_RULES: Dict[str, IndicatorRule] = {
    # Velocity
    "velocity_hourly_count": IndicatorRule(IndicatorType.VELOCITY, Severity.HIGH, 25, 0.9),
    "velocity_hourly_amount": IndicatorRule(IndicatorType.VELOCITY, Severity.HIGH, 30, 0.95),
    "velocity_daily_amount": IndicatorRule(IndicatorType.VELOCITY, Severity.MEDIUM, 20, 0.8),
    "velocity_spike": IndicatorRule(IndicatorType.VELOCITY, Severity.MEDIUM, 15, 0.7),
    # Behavioral
    "behavioral_amount_high": IndicatorRule(IndicatorType.BEHAVIORAL, Severity.HIGH, 25, 0.85),
    "behavioral_amount_critical": IndicatorRule(IndicatorType.BEHAVIORAL, Severity.CRITICAL, 35, 0.85),
    "behavioral_payment_method": IndicatorRule(IndicatorType.BEHAVIORAL, Severity.MEDIUM, 15, 0.6),
    "temporal_unusual_hour": IndicatorRule(IndicatorType.TEMPORAL, Severity.LOW, 10, 0.5),
    "behavioral_new_user_withdrawal": IndicatorRule(IndicatorType.BEHAVIORAL, Severity.MEDIUM, 20, 0.8),
    # Geolocation
    "geolocation_new_country": IndicatorRule(IndicatorType.GEOLOCATION, Severity.MEDIUM, 15, 0.7),
    "geolocation_high_risk_country": IndicatorRule(IndicatorType.GEOLOCATION, Severity.HIGH, 25, 0.7),
    "geolocation_impossible_travel": IndicatorRule(IndicatorType.GEOLOCATION, Severity.HIGH, 30, 0.9),
    # Device
    "device_unrecognized": IndicatorRule(IndicatorType.DEVICE, Severity.MEDIUM, 15, 0.6),
    "device_suspicious_user_agent": IndicatorRule(IndicatorType.DEVICE, Severity.HIGH, 25, 0.8),
    # Pattern
    "pattern_round_amount": IndicatorRule(IndicatorType.PATTERN, Severity.LOW, 5, 0.4),
    "pattern_sequential_amounts": IndicatorRule(IndicatorType.PATTERN, Severity.MEDIUM, 20, 0.7),
    "pattern_shared_payment_fingerprint": IndicatorRule(IndicatorType.PATTERN, Severity.HIGH, 35, 0.9),
    "pattern_account_takeover": IndicatorRule(IndicatorType.PATTERN, Severity.CRITICAL, 40, 0.8),
    # Network
    "network_malicious_ip": IndicatorRule(IndicatorType.NETWORK, Severity.CRITICAL, 45, 0.95),
    "network_anonymizing_proxy": IndicatorRule(IndicatorType.NETWORK, Severity.MEDIUM, 20, 0.8),
    "network_tor_exit": IndicatorRule(IndicatorType.NETWORK, Severity.HIGH, 30, 0.9),
    # Synthetic indicator attached to the fail-open default result
    "system_analysis_failure": IndicatorRule(IndicatorType.PATTERN, Severity.MEDIUM, 10, 0.5),
}


def build_indicator(rule_name: str, description: str, evidence: Dict[str, Any]) -> FraudIndicator:
    """Create an indicator with the weight/severity/confidence registered for rule_name.

    Raises:
        KeyError: If rule_name is not a registered rule
    """
    rule = INDICATOR_RULES[rule_name]
    return FraudIndicator(
        type=rule.type,
        severity=rule.severity,
        description=description,
        evidence=evidence,
        confidence=rule.confidence,
        weight=rule.weight,
        rule=rule_name,
    )


def indicator_points(indicator: FraudIndicator) -> float:
    """Contribution of a single indicator to the aggregate score"""
    return indicator.weight * indicator.confidence * SEVERITY_MULTIPLIER[indicator.severity]
