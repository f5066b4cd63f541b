"""Unit tests for profile bootstrap and exponential smoothing"""

import pytest
from datetime import timedelta
from fraud_gateway.domain.config import RiskThresholds
from fraud_gateway.domain.models import AccountSnapshot, HistoricalTransaction, RiskFactors, RiskLevel
from fraud_gateway.domain.profile import (
    analyze_transaction_history,
    build_profile,
    calculate_base_risk_score,
    calculate_factors,
    smooth_profile,
)


def test_analyze_empty_history_uses_defaults():
    baseline = analyze_transaction_history([])

    assert baseline.average_transaction_amount == 5000
    assert baseline.transaction_frequency == 0
    assert baseline.preferred_payment_methods == []
    assert baseline.typical_transaction_hours == []
    assert baseline.geolocation_patterns == []


def test_analyze_history_caps_and_thresholds(now):
    """Top-3 methods by frequency, hours in >= 10% of history, distinct countries"""
    methods = ["card"] * 8 + ["bank"] * 6 + ["wallet"] * 4 + ["crypto"] * 2
    transactions = []
    for i, method in enumerate(methods):
        # 19 transactions at 14:00, one outlier at 03:00
        hour = 3 if i == 0 else 14
        transactions.append(
            HistoricalTransaction(
                transaction_id=f"t{i}",
                amount=1000 + i * 100,
                timestamp=(now - timedelta(days=i + 1)).replace(hour=hour),
                country="FR" if i % 2 else "BE",
                payment_method=method,
            )
        )

    baseline = analyze_transaction_history(transactions)

    assert baseline.transaction_frequency == 20
    assert baseline.average_transaction_amount == pytest.approx(1950)
    assert baseline.preferred_payment_methods == ["card", "bank", "wallet"]
    assert baseline.typical_transaction_hours == [14]
    assert sorted(baseline.geolocation_patterns) == ["BE", "FR"]


def test_calculate_factors_for_established_verified_account(now):
    account = AccountSnapshot(user_id="u", created_at=now - timedelta(days=15), kyc_status="approved")
    factors = calculate_factors(account, transaction_count=4, now=now)

    assert factors.account_age == pytest.approx(50)  # 15 of 30 days
    assert factors.transaction_history == 40
    assert factors.verification_level == 100
    assert factors.behavioral_consistency == 50
    assert factors.network_reputation == 50


def test_calculate_factors_caps_and_unknown_account(now):
    old = AccountSnapshot(user_id="u", created_at=now - timedelta(days=900), kyc_status="pending")
    assert calculate_factors(old, 50, now).account_age == 100
    assert calculate_factors(old, 50, now).transaction_history == 100
    assert calculate_factors(old, 50, now).verification_level == 0

    missing = calculate_factors(None, 0, now)
    assert missing.account_age == 0
    assert missing.verification_level == 0


def test_base_risk_score_extremes():
    best = RiskFactors(account_age=100, transaction_history=100, verification_level=100)
    worst = RiskFactors(account_age=0, transaction_history=0, verification_level=0)

    # Only the two defaulted factors (50 each) contribute
    assert calculate_base_risk_score(best) == pytest.approx(50 * 0.15 + 50 * 0.1)
    assert calculate_base_risk_score(worst) == pytest.approx(100 * 0.75 + 50 * 0.25)


def test_build_profile_for_unknown_user(now):
    profile = build_profile("u", None, [], RiskThresholds(), now)

    assert profile.user_id == "u"
    assert profile.risk_score == pytest.approx(87.5)
    assert profile.risk_level == RiskLevel.HIGH
    assert profile.last_updated == now
    assert profile.flags == []


def test_smooth_profile_blends_scores(profile_factory, now):
    profile = profile_factory(risk_score=40)
    updated = smooth_profile(profile, 80, RiskThresholds(), now)

    assert updated.risk_score == pytest.approx(52)
    assert updated.risk_level == RiskLevel.MEDIUM
    assert updated.last_updated == now
    assert profile.risk_score == 40  # original untouched
    assert updated.historical_analysis == profile.historical_analysis
