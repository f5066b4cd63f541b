"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from fraud_gateway.api.dependencies import get_ip_reputation_client, get_profile_cache
from fraud_gateway.api.main import create_app
from fraud_gateway.domain.config import DetectionConfig
from fraud_gateway.domain.models import (
    AccountSnapshot,
    BlockRecord,
    FraudAnalysisResult,
    HistoricalAnalysis,
    HistoricalTransaction,
    IPReputation,
    KnownDevice,
    PaymentDescriptor,
    RiskFactors,
    RiskLevel,
    TransactionContext,
    TransactionSource,
    TransactionType,
    UserRiskProfile,
)
from fraud_gateway.infrastructure.cache.profile_cache import ProfileCache
from fraud_gateway.infrastructure.database.models import Base
from fraud_gateway.infrastructure.database.session import build_engine, get_session_factory
from fraud_gateway.services.engine import FraudDetectionEngine
from fraud_gateway.services.enforcement import EnforcementTrigger


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Tuesday 14:30 UTC; keeps hour-of-day checks predictable
NOW = datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc)

KNOWN_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 Safari/605.1.15"


class InMemoryHistory:
    """Transaction history backed by a list; mirrors the SQL repository's ordering"""

    def __init__(self, transactions: Optional[Dict[str, List[HistoricalTransaction]]] = None):
        self.transactions = transactions or {}
        self.fingerprint_users: Dict[str, int] = {}
        self.fail_with: Optional[Exception] = None

    async def list_transactions(self, user_id, start, end):
        if self.fail_with:
            raise self.fail_with
        rows = [t for t in self.transactions.get(user_id, []) if start <= t.timestamp <= end]
        return sorted(rows, key=lambda t: t.timestamp, reverse=True)

    async def list_all_confirmed(self, user_id, limit):
        if self.fail_with:
            raise self.fail_with
        rows = sorted(self.transactions.get(user_id, []), key=lambda t: t.timestamp, reverse=True)
        return rows[:limit]

    async def count_users_for_fingerprint(self, fingerprint):
        if self.fail_with:
            raise self.fail_with
        return self.fingerprint_users.get(fingerprint, 1)


class InMemoryProfiles:
    def __init__(self):
        self.profiles: Dict[str, UserRiskProfile] = {}
        self.writes = 0

    async def get(self, user_id):
        return self.profiles.get(user_id)

    async def put(self, profile):
        self.writes += 1
        self.profiles[profile.user_id] = profile


class InMemoryAnalyses:
    def __init__(self):
        self.results: Dict[str, FraudAnalysisResult] = {}
        self.fail_with: Optional[Exception] = None

    async def put(self, result):
        if self.fail_with:
            raise self.fail_with
        self.results[result.transaction_id] = result

    async def get(self, transaction_id):
        return self.results.get(transaction_id)

    async def list_between(self, start, end):
        return [
            r for r in self.results.values()
            if start <= r.metadata.analysis_timestamp <= end
        ]


class InMemoryDevices:
    def __init__(self):
        self.devices: Dict[str, List[KnownDevice]] = {}

    async def list_devices(self, user_id):
        return list(self.devices.get(user_id, []))


class StaticIPReputation:
    def __init__(self, reputation: Optional[IPReputation] = None):
        self.reputation = reputation or IPReputation()
        self.fail_with: Optional[Exception] = None

    async def check(self, ip):
        if self.fail_with:
            raise self.fail_with
        return self.reputation


class InMemoryAccounts:
    def __init__(self):
        self.accounts: Dict[str, AccountSnapshot] = {}
        self.flagged: List[str] = []

    async def get_account(self, user_id):
        return self.accounts.get(user_id)

    async def flag_for_review(self, user_id, flagged_at):
        self.flagged.append(user_id)


class InMemoryBlocks:
    def __init__(self):
        self.records: List[BlockRecord] = []
        self.fail_with: Optional[Exception] = None

    async def put(self, record):
        if self.fail_with:
            raise self.fail_with
        self.records.append(record)


class Collaborators:
    """Bundle of in-memory collaborators plus an engine factory"""

    def __init__(self):
        self.history = InMemoryHistory()
        self.profiles = InMemoryProfiles()
        self.analyses = InMemoryAnalyses()
        self.devices = InMemoryDevices()
        self.ip_reputation = StaticIPReputation()
        self.accounts = InMemoryAccounts()
        self.blocks = InMemoryBlocks()

    def engine(self, config: Optional[DetectionConfig] = None, **kwargs) -> FraudDetectionEngine:
        config = config or DetectionConfig()
        return FraudDetectionEngine(
            config=config,
            history=self.history,
            profiles=self.profiles,
            analyses=self.analyses,
            devices=self.devices,
            ip_reputation=self.ip_reputation,
            accounts=self.accounts,
            enforcement=EnforcementTrigger(config.blocking, self.blocks, self.accounts),
            cache=kwargs.pop("cache", ProfileCache()),
            clock=kwargs.pop("clock", lambda: NOW),
            **kwargs,
        )


def make_context(
    amount: int = 1234,
    user_id: str = "user_1",
    transaction_id: str = "txn_1",
    type: TransactionType = TransactionType.CONTRIBUTION,
    country: Optional[str] = "FR",
    ip: str = "81.56.12.4",
    user_agent: Optional[str] = KNOWN_USER_AGENT,
    device: Optional[str] = "macbook",
    method: str = "card",
    card_fingerprint: Optional[str] = None,
    timestamp: datetime = NOW,
) -> TransactionContext:
    return TransactionContext(
        transaction_id=transaction_id,
        user_id=user_id,
        amount=amount,
        currency="EUR",
        type=type,
        source=TransactionSource(ip=ip, country=country, device=device, user_agent=user_agent),
        payment=PaymentDescriptor(method=method, card_fingerprint=card_fingerprint),
        timestamp=timestamp,
    )


def make_profile(
    user_id: str = "user_1",
    risk_score: float = 10.0,
    average_amount: float = 5000.0,
    frequency: int = 20,
    methods: Optional[List[str]] = None,
    hours: Optional[List[int]] = None,
    countries: Optional[List[str]] = None,
) -> UserRiskProfile:
    return UserRiskProfile(
        user_id=user_id,
        risk_score=risk_score,
        risk_level=RiskLevel.LOW,
        factors=RiskFactors(account_age=100, transaction_history=100, verification_level=100),
        historical_analysis=HistoricalAnalysis(
            average_transaction_amount=average_amount,
            transaction_frequency=frequency,
            preferred_payment_methods=["card"] if methods is None else methods,
            typical_transaction_hours=[13, 14, 15] if hours is None else hours,
            geolocation_patterns=["FR"] if countries is None else countries,
        ),
        last_updated=NOW - timedelta(days=1),
    )


@pytest.fixture
def collaborators() -> Collaborators:
    return Collaborators()


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def profile_factory():
    return make_profile


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory the SQL repositories open their sessions from; tables exist for the test"""
    return TestingSessionLocal


@pytest.fixture
def ip_reputation() -> StaticIPReputation:
    return StaticIPReputation()


@pytest.fixture
def client(db: Session, ip_reputation: StaticIPReputation) -> TestClient:
    """Create FastAPI test client with test database and stubbed IP reputation"""
    app = create_app()
    cache = ProfileCache()

    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_ip_reputation_client] = lambda: ip_reputation
    app.dependency_overrides[get_profile_cache] = lambda: cache
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return NOW
