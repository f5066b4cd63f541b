"""
Data access layer implementing the engine's storage collaborators.

SQLAlchemy sessions are synchronous, so each repository call runs in a
worker thread with a session of its own. A detector or analysis timeout
cancels the awaiting coroutine without blocking the event loop; the
abandoned query finishes in its thread and its rows are discarded.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fraud_gateway.domain.exceptions import StorageError
from fraud_gateway.domain.models import (
    AccountSnapshot,
    AnalysisMetadata,
    BlockRecord,
    FraudAnalysisResult,
    FraudIndicator,
    HistoricalAnalysis,
    HistoricalTransaction,
    IndicatorType,
    KnownDevice,
    Recommendation,
    RiskFactors,
    RiskLevel,
    Severity,
    UserRiskProfile,
)
from fraud_gateway.infrastructure.database.models import (
    BlockedTransaction,
    FraudAnalysisRecord,
    PaymentTransaction,
    UserAccount,
    UserDevice,
    UserRiskProfileRecord,
)
from fraud_gateway.utils.date_utils import ensure_utc

CONFIRMED = "confirmed"

T = TypeVar("T")


class SQLRepository:
    """Base for repositories; every call gets its own short-lived session"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def _run(self, work: Callable[[Session], T], failure: str) -> T:
        return await asyncio.to_thread(self._in_session, work, failure)

    def _in_session(self, work: Callable[[Session], T], failure: str) -> T:
        with self.session_factory() as db:
            try:
                return work(db)
            except SQLAlchemyError as e:
                db.rollback()
                raise StorageError(f"{failure}: {e}") from e


def _to_historical(row: PaymentTransaction) -> HistoricalTransaction:
    return HistoricalTransaction(
        transaction_id=row.id,
        amount=row.amount,
        timestamp=ensure_utc(row.created_at),
        country=row.country,
        payment_method=row.payment_method,
    )


class TransactionHistoryRepository(SQLRepository):
    """Bounded read-only queries over confirmed transactions"""

    async def list_transactions(self, user_id: str, start: datetime, end: datetime) -> List[HistoricalTransaction]:
        def query(db: Session) -> List[HistoricalTransaction]:
            rows = (
                db.query(PaymentTransaction)
                .filter(
                    PaymentTransaction.user_id == user_id,
                    PaymentTransaction.status == CONFIRMED,
                    PaymentTransaction.created_at >= ensure_utc(start),
                    PaymentTransaction.created_at <= ensure_utc(end),
                )
                .order_by(PaymentTransaction.created_at.desc())
                .all()
            )
            return [_to_historical(row) for row in rows]

        return await self._run(query, "Transaction history query failed")

    async def list_all_confirmed(self, user_id: str, limit: int) -> List[HistoricalTransaction]:
        def query(db: Session) -> List[HistoricalTransaction]:
            rows = (
                db.query(PaymentTransaction)
                .filter(PaymentTransaction.user_id == user_id, PaymentTransaction.status == CONFIRMED)
                .order_by(PaymentTransaction.created_at.desc())
                .limit(limit)
                .all()
            )
            return [_to_historical(row) for row in rows]

        return await self._run(query, "Transaction history query failed")

    async def count_users_for_fingerprint(self, fingerprint: str) -> int:
        def query(db: Session) -> int:
            return (
                db.query(func.count(func.distinct(PaymentTransaction.user_id)))
                .filter(PaymentTransaction.payment_fingerprint == fingerprint)
                .scalar()
                or 0
            )

        return await self._run(query, "Payment fingerprint query failed")


class RiskProfileRepository(SQLRepository):
    """Repository for user risk profiles"""

    async def get(self, user_id: str) -> Optional[UserRiskProfile]:
        def read(db: Session) -> Optional[UserRiskProfile]:
            record = db.get(UserRiskProfileRecord, user_id)
            if record is None:
                return None

            return UserRiskProfile(
                user_id=record.user_id,
                risk_score=record.risk_score,
                risk_level=RiskLevel(record.risk_level),
                factors=RiskFactors(**record.factors),
                historical_analysis=HistoricalAnalysis(**record.historical_analysis),
                last_updated=ensure_utc(record.last_updated),
                flags=list(record.flags or []),
            )

        return await self._run(read, "Risk profile read failed")

    async def put(self, profile: UserRiskProfile) -> None:
        baseline = profile.historical_analysis
        factors = profile.factors
        record = UserRiskProfileRecord(
            user_id=profile.user_id,
            risk_score=profile.risk_score,
            risk_level=profile.risk_level.value,
            factors={
                "account_age": factors.account_age,
                "transaction_history": factors.transaction_history,
                "verification_level": factors.verification_level,
                "behavioral_consistency": factors.behavioral_consistency,
                "network_reputation": factors.network_reputation,
            },
            flags=list(profile.flags),
            historical_analysis={
                "average_transaction_amount": baseline.average_transaction_amount,
                "transaction_frequency": baseline.transaction_frequency,
                "preferred_payment_methods": list(baseline.preferred_payment_methods),
                "typical_transaction_hours": list(baseline.typical_transaction_hours),
                "geolocation_patterns": list(baseline.geolocation_patterns),
            },
            last_updated=ensure_utc(profile.last_updated),
        )

        def write(db: Session) -> None:
            db.merge(record)
            db.commit()

        await self._run(write, "Risk profile write failed")


def _indicator_to_dict(indicator: FraudIndicator) -> Dict[str, Any]:
    return {
        "type": indicator.type.value,
        "severity": indicator.severity.value,
        "description": indicator.description,
        "evidence": indicator.evidence,
        "confidence": indicator.confidence,
        "weight": indicator.weight,
        "rule": indicator.rule,
    }


def _indicator_from_dict(data: Dict[str, Any]) -> FraudIndicator:
    return FraudIndicator(
        type=IndicatorType(data["type"]),
        severity=Severity(data["severity"]),
        description=data["description"],
        evidence=data["evidence"],
        confidence=data["confidence"],
        weight=data["weight"],
        rule=data["rule"],
    )


class AnalysisRepository(SQLRepository):
    """Write-once audit trail of analysis results"""

    async def put(self, result: FraudAnalysisResult) -> None:
        def write(db: Session) -> None:
            if db.get(FraudAnalysisRecord, result.transaction_id) is not None:
                raise StorageError(f"Analysis for {result.transaction_id} already recorded")

            db.add(
                FraudAnalysisRecord(
                    transaction_id=result.transaction_id,
                    user_id=result.user_id,
                    risk_score=result.risk_score,
                    risk_level=result.risk_level.value,
                    recommendation=result.recommendation.value,
                    confidence=result.confidence,
                    indicators=[_indicator_to_dict(i) for i in result.indicators],
                    model_version=result.metadata.model_version,
                    processing_time_ms=result.metadata.processing_time_ms,
                    analyzed_at=ensure_utc(result.metadata.analysis_timestamp),
                )
            )
            db.commit()

        await self._run(write, "Analysis write failed")

    async def get(self, transaction_id: str) -> Optional[FraudAnalysisResult]:
        def read(db: Session) -> Optional[FraudAnalysisResult]:
            record = db.get(FraudAnalysisRecord, transaction_id)
            return self._to_result(record) if record is not None else None

        return await self._run(read, "Analysis read failed")

    async def list_between(self, start: datetime, end: datetime) -> List[FraudAnalysisResult]:
        def query(db: Session) -> List[FraudAnalysisResult]:
            records = (
                db.query(FraudAnalysisRecord)
                .filter(
                    FraudAnalysisRecord.analyzed_at >= ensure_utc(start),
                    FraudAnalysisRecord.analyzed_at <= ensure_utc(end),
                )
                .all()
            )
            return [self._to_result(record) for record in records]

        return await self._run(query, "Analysis query failed")

    @staticmethod
    def _to_result(record: FraudAnalysisRecord) -> FraudAnalysisResult:
        return FraudAnalysisResult(
            transaction_id=record.transaction_id,
            user_id=record.user_id,
            risk_score=record.risk_score,
            risk_level=RiskLevel(record.risk_level),
            indicators=[_indicator_from_dict(i) for i in record.indicators],
            recommendation=Recommendation(record.recommendation),
            confidence=record.confidence,
            metadata=AnalysisMetadata(
                analysis_timestamp=ensure_utc(record.analyzed_at),
                model_version=record.model_version,
                processing_time_ms=record.processing_time_ms,
            ),
        )


class DeviceRepository(SQLRepository):
    async def list_devices(self, user_id: str) -> List[KnownDevice]:
        def query(db: Session) -> List[KnownDevice]:
            rows = db.query(UserDevice).filter(UserDevice.user_id == user_id).all()
            return [KnownDevice(fingerprint=row.fingerprint, last_seen=ensure_utc(row.last_seen)) for row in rows]

        return await self._run(query, "Device query failed")


class AccountRepository(SQLRepository):
    """Account lookup for profile bootstrap and review flagging"""

    async def get_account(self, user_id: str) -> Optional[AccountSnapshot]:
        def read(db: Session) -> Optional[AccountSnapshot]:
            account = db.get(UserAccount, user_id)
            if account is None:
                return None

            return AccountSnapshot(
                user_id=account.id,
                created_at=ensure_utc(account.created_at) if account.created_at else None,
                kyc_status=account.kyc_status,
            )

        return await self._run(read, "Account read failed")

    async def flag_for_review(self, user_id: str, flagged_at: datetime) -> None:
        def write(db: Session) -> None:
            account = db.get(UserAccount, user_id)
            if account is None:
                raise StorageError(f"Cannot flag unknown account {user_id}")

            account.fraud_suspected = True
            account.requires_review = True
            account.last_flagged_at = ensure_utc(flagged_at)
            db.commit()

        await self._run(write, "Account flag failed")


class BlockRepository(SQLRepository):
    async def put(self, record: BlockRecord) -> None:
        row = BlockedTransaction(
            transaction_id=record.transaction_id,
            user_id=record.user_id,
            reason=record.reason,
            risk_score=record.risk_score,
            indicator_types=list(record.indicator_types),
            status=record.status,
            created_at=ensure_utc(record.created_at),
        )

        def write(db: Session) -> None:
            db.merge(row)
            db.commit()

        await self._run(write, "Block record write failed")
