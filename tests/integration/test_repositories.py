"""Integration tests for the SQLAlchemy repositories against SQLite"""

import time
import pytest
from dataclasses import replace
from datetime import timedelta
from prometheus_client import REGISTRY
from sqlalchemy import event
from sqlalchemy.orm import Session, sessionmaker
from fraud_gateway.domain.config import DetectionConfig
from fraud_gateway.domain.detectors.velocity import detect_velocity
from fraud_gateway.domain.exceptions import StorageError
from fraud_gateway.domain.models import (
    AnalysisMetadata,
    BlockRecord,
    FraudAnalysisResult,
    Recommendation,
    RiskLevel,
)
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.infrastructure.database.models import (
    BlockedTransaction,
    PaymentTransaction,
    UserAccount,
    UserDevice,
)
from fraud_gateway.infrastructure.database.repositories import (
    AccountRepository,
    AnalysisRepository,
    BlockRepository,
    DeviceRepository,
    RiskProfileRepository,
    TransactionHistoryRepository,
)

from conftest import NOW, engine, make_context, make_profile


def add_payment(db: Session, txn_id, user_id="user_1", amount=1000, minutes_ago=30, status="confirmed", fingerprint=None):
    db.add(
        PaymentTransaction(
            id=txn_id,
            user_id=user_id,
            amount=amount,
            currency="EUR",
            status=status,
            country="FR",
            payment_method="card",
            payment_fingerprint=fingerprint,
            created_at=NOW - timedelta(minutes=minutes_ago),
        )
    )
    db.commit()


def make_result(transaction_id="txn_1", analyzed_at=NOW, recommendation=Recommendation.APPROVE):
    return FraudAnalysisResult(
        transaction_id=transaction_id,
        user_id="user_1",
        risk_score=12.5,
        risk_level=RiskLevel.LOW,
        indicators=[build_indicator("device_unrecognized", "Transaction from unrecognized device", {"known_device_count": 0})],
        recommendation=recommendation,
        confidence=0.66,
        metadata=AnalysisMetadata(analysis_timestamp=analyzed_at, model_version="1.0.0", processing_time_ms=4.5),
    )


async def test_history_window_and_status_filter(db: Session, session_factory: sessionmaker):
    add_payment(db, "recent", minutes_ago=10)
    add_payment(db, "older", minutes_ago=50)
    add_payment(db, "outside", minutes_ago=200)
    add_payment(db, "pending", minutes_ago=5, status="pending")
    add_payment(db, "other_user", user_id="user_2", minutes_ago=5)

    history = TransactionHistoryRepository(session_factory)
    rows = await history.list_transactions("user_1", NOW - timedelta(hours=1), NOW)

    assert [r.transaction_id for r in rows] == ["recent", "older"]
    assert rows[0].timestamp.tzinfo is not None


async def test_list_all_confirmed_is_bounded(db: Session, session_factory: sessionmaker):
    for i in range(5):
        add_payment(db, f"t{i}", minutes_ago=i * 60)

    rows = await TransactionHistoryRepository(session_factory).list_all_confirmed("user_1", limit=3)

    assert [r.transaction_id for r in rows] == ["t0", "t1", "t2"]


async def test_count_users_for_fingerprint(db: Session, session_factory: sessionmaker):
    add_payment(db, "a1", user_id="a", fingerprint="fp_1")
    add_payment(db, "a2", user_id="a", fingerprint="fp_1")
    add_payment(db, "b1", user_id="b", fingerprint="fp_1")
    add_payment(db, "c1", user_id="c", fingerprint="fp_2")

    history = TransactionHistoryRepository(session_factory)

    assert await history.count_users_for_fingerprint("fp_1") == 2
    assert await history.count_users_for_fingerprint("unused") == 0


async def test_profile_round_trip_and_overwrite(session_factory: sessionmaker):
    profiles = RiskProfileRepository(session_factory)
    profile = make_profile()

    assert await profiles.get("user_1") is None

    await profiles.put(profile)
    stored = await profiles.get("user_1")
    assert stored == profile

    await profiles.put(replace(profile, risk_score=33.0, risk_level=RiskLevel.LOW))
    assert (await profiles.get("user_1")).risk_score == 33.0


async def test_analysis_is_write_once(session_factory: sessionmaker):
    analyses = AnalysisRepository(session_factory)
    result = make_result()

    await analyses.put(result)

    assert await analyses.get("txn_1") == result
    assert await analyses.get("missing") is None
    with pytest.raises(StorageError):
        await analyses.put(replace(result, risk_score=99.0))
    assert (await analyses.get("txn_1")).risk_score == 12.5


async def test_analysis_list_between(session_factory: sessionmaker):
    analyses = AnalysisRepository(session_factory)
    await analyses.put(make_result("a", analyzed_at=NOW - timedelta(hours=2)))
    await analyses.put(make_result("b", analyzed_at=NOW))
    await analyses.put(make_result("c", analyzed_at=NOW + timedelta(hours=2)))

    found = await analyses.list_between(NOW - timedelta(hours=1), NOW + timedelta(hours=1))

    assert [r.transaction_id for r in found] == ["b"]


async def test_devices(db: Session, session_factory: sessionmaker):
    db.add(UserDevice(user_id="user_1", fingerprint="abc", last_seen=NOW))
    db.add(UserDevice(user_id="user_2", fingerprint="def", last_seen=NOW))
    db.commit()

    devices = await DeviceRepository(session_factory).list_devices("user_1")

    assert [d.fingerprint for d in devices] == ["abc"]


async def test_account_lookup_and_flag(db: Session, session_factory: sessionmaker):
    db.add(UserAccount(id="user_1", kyc_status="approved", created_at=NOW - timedelta(days=90)))
    db.commit()
    accounts = AccountRepository(session_factory)

    snapshot = await accounts.get_account("user_1")
    assert snapshot.kyc_status == "approved"
    assert snapshot.created_at == NOW - timedelta(days=90)
    assert await accounts.get_account("nobody") is None

    await accounts.flag_for_review("user_1", NOW)
    account = db.get(UserAccount, "user_1")
    assert account.fraud_suspected is True
    assert account.requires_review is True

    with pytest.raises(StorageError):
        await accounts.flag_for_review("nobody", NOW)


async def test_block_record(db: Session, session_factory: sessionmaker):
    await BlockRepository(session_factory).put(
        BlockRecord(
            transaction_id="txn_1",
            user_id="user_1",
            risk_score=97.0,
            indicator_types=["behavioral", "network"],
            created_at=NOW,
        )
    )

    row = db.get(BlockedTransaction, "txn_1")
    assert row.reason == "fraud_detection"
    assert row.status == "blocked"
    assert row.indicator_types == ["behavioral", "network"]


async def test_slow_history_query_is_abandoned_by_detector_timeout(db: Session, session_factory: sessionmaker, collaborators):
    """11 payments in the last hour would trip velocity, but the query outlives the detector timeout"""
    for i in range(11):
        add_payment(db, f"recent_{i}", minutes_ago=5 * i + 1)
    collaborators.profiles.profiles["user_1"] = make_profile()
    collaborators.history = TransactionHistoryRepository(session_factory)

    def slow_payment_queries(conn, cursor, statement, parameters, context, executemany):
        if "payment_transaction" in statement:
            time.sleep(0.3)

    labels = {"detector": "velocity", "reason": "timeout"}
    timeouts_before = REGISTRY.get_sample_value("fraud_detector_failures_total", labels) or 0

    event.listen(engine, "before_cursor_execute", slow_payment_queries)
    try:
        result = await collaborators.engine(
            config=DetectionConfig(detector_timeout_seconds=0.05),
            detectors={"velocity": detect_velocity},
        ).analyze(make_context())
    finally:
        event.remove(engine, "before_cursor_execute", slow_payment_queries)

    assert result.indicators == []
    assert result.recommendation == Recommendation.APPROVE
    assert result.metadata.processing_time_ms < 250
    assert collaborators.blocks.records == []
    assert REGISTRY.get_sample_value("fraud_detector_failures_total", labels) == timeouts_before + 1
