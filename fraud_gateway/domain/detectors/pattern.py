"""Pattern detector: round amounts, progressions, shared instruments, account takeover"""

from typing import List, Sequence

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator, TransactionContext, UserRiskProfile
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.utils.date_utils import ensure_utc, trailing_window

ROUND_AMOUNT_DIVISORS = (1000, 5000, 10000)
SEQUENCE_TOLERANCE = 100  # minor units
RECENT_AMOUNTS_LIMIT = 5
SHARED_FINGERPRINT_MAX_USERS = 3
TAKEOVER_MIN_SIGNALS = 2


def is_round_amount(amount: int) -> bool:
    return any(amount % divisor == 0 for divisor in ROUND_AMOUNT_DIVISORS)


def has_sequential_pattern(amounts: Sequence[int], tolerance: int = SEQUENCE_TOLERANCE) -> bool:
    """True if any three consecutive amounts form a near-arithmetic progression"""
    if len(amounts) < 3:
        return False

    for i in range(len(amounts) - 2):
        first_step = amounts[i + 1] - amounts[i]
        second_step = amounts[i + 2] - amounts[i + 1]
        if abs(first_step - second_step) < tolerance:
            return True

    return False


def takeover_signals(txn: TransactionContext, profile: UserRiskProfile, amount_multiplier: float) -> List[str]:
    """
    Names of the account-takeover signals present on this transaction.

    Method and country only count as unrecognized once the profile has
    observed at least one of them.
    """
    baseline = profile.historical_analysis
    signals = []

    if txn.amount > baseline.average_transaction_amount * amount_multiplier:
        signals.append("amount_spike")

    if baseline.preferred_payment_methods and txn.payment.method not in baseline.preferred_payment_methods:
        signals.append("new_payment_method")

    country = txn.source.country
    if country and baseline.geolocation_patterns and country not in baseline.geolocation_patterns:
        signals.append("new_country")

    return signals


async def detect_patterns(ctx: DetectionContext) -> List[FraudIndicator]:
    txn = ctx.transaction
    indicators = []

    if is_round_amount(txn.amount):
        indicators.append(
            build_indicator("pattern_round_amount", "Round number transaction amount", {"amount": txn.amount})
        )

    if ctx.config.enable_pattern_recognition:
        start, end = trailing_window(ensure_utc(txn.timestamp), 24)
        recent = await ctx.history.list_transactions(txn.user_id, start, end)
        recent_amounts = [t.amount for t in recent[:RECENT_AMOUNTS_LIMIT]]
        if has_sequential_pattern(recent_amounts):
            indicators.append(
                build_indicator(
                    "pattern_sequential_amounts",
                    "Sequential transaction amount pattern detected",
                    {"amounts": recent_amounts},
                )
            )

    fingerprint = txn.payment.fingerprint
    if fingerprint:
        user_count = await ctx.history.count_users_for_fingerprint(fingerprint)
        if user_count > SHARED_FINGERPRINT_MAX_USERS:
            indicators.append(
                build_indicator(
                    "pattern_shared_payment_fingerprint",
                    "Payment method used by multiple users",
                    {"payment_fingerprint": fingerprint, "user_count": user_count},
                )
            )

    if ctx.config.enable_pattern_recognition:
        signals = takeover_signals(txn, ctx.profile, ctx.config.behavior.suspicious_amount_multiplier)
        if len(signals) >= TAKEOVER_MIN_SIGNALS:
            indicators.append(
                build_indicator(
                    "pattern_account_takeover",
                    "Potential account takeover detected",
                    {"signals": signals},
                )
            )

    return indicators
