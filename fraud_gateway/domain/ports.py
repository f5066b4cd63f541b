"""Collaborator contracts the engine depends on"""

from datetime import datetime
from typing import List, Optional, Protocol

from fraud_gateway.domain.models import (
    AccountSnapshot,
    BlockRecord,
    FraudAnalysisResult,
    HistoricalTransaction,
    IPReputation,
    KnownDevice,
    UserRiskProfile,
)


class TransactionHistory(Protocol):
    async def list_transactions(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[HistoricalTransaction]:
        """Confirmed transactions in [start, end], most recent first"""
        ...

    async def list_all_confirmed(self, user_id: str, limit: int) -> List[HistoricalTransaction]:
        ...

    async def count_users_for_fingerprint(self, fingerprint: str) -> int:
        """Number of distinct users that paid with this instrument"""
        ...


class RiskProfileStore(Protocol):
    async def get(self, user_id: str) -> Optional[UserRiskProfile]:
        ...

    async def put(self, profile: UserRiskProfile) -> None:
        ...


class AnalysisStore(Protocol):
    async def put(self, result: FraudAnalysisResult) -> None:
        ...

    async def get(self, transaction_id: str) -> Optional[FraudAnalysisResult]:
        ...

    async def list_between(self, start: datetime, end: datetime) -> List[FraudAnalysisResult]:
        ...


class DeviceStore(Protocol):
    async def list_devices(self, user_id: str) -> List[KnownDevice]:
        ...


class IPReputationLookup(Protocol):
    async def check(self, ip: str) -> IPReputation:
        ...


class AccountDirectory(Protocol):
    async def get_account(self, user_id: str) -> Optional[AccountSnapshot]:
        ...


class BlockRecordStore(Protocol):
    async def put(self, record: BlockRecord) -> None:
        ...


class AccountFlagger(Protocol):
    async def flag_for_review(self, user_id: str, flagged_at: datetime) -> None:
        ...
