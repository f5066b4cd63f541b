"""Domain models - pure Python dataclasses representing fraud analysis entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class TransactionType(str, Enum):
    CONTRIBUTION = "contribution"
    REFUND = "refund"
    TRANSFER = "transfer"
    WITHDRAWAL = "withdrawal"


class IndicatorType(str, Enum):
    VELOCITY = "velocity"
    AMOUNT = "amount"
    BEHAVIORAL = "behavioral"
    GEOLOCATION = "geolocation"
    DEVICE = "device"
    PATTERN = "pattern"
    NETWORK = "network"
    TEMPORAL = "temporal"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Recommendation(str, Enum):
    APPROVE = "approve"
    REVIEW = "review"
    INVESTIGATE = "investigate"
    BLOCK = "block"


@dataclass(frozen=True)
class TransactionSource:
    """Where the transaction attempt originated"""

    ip: str
    country: Optional[str] = None
    device: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class PaymentDescriptor:
    """Payment instrument used for the attempt"""

    method: str
    card_fingerprint: Optional[str] = None
    bank_account: Optional[str] = None
    digital_wallet: Optional[str] = None

    @property
    def fingerprint(self) -> Optional[str]:
        """Stable identifier of the underlying instrument (card, then bank, then wallet)"""
        return self.card_fingerprint or self.bank_account or self.digital_wallet


@dataclass(frozen=True)
class TransactionContext:
    """Transaction attempt submitted for analysis. Never mutated by the engine."""

    transaction_id: str
    user_id: str
    amount: int  # minor currency units
    currency: str
    type: TransactionType
    source: TransactionSource
    payment: PaymentDescriptor
    timestamp: datetime
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class HistoricalTransaction:
    """Confirmed transaction returned by the history query"""

    transaction_id: str
    amount: int
    timestamp: datetime
    country: Optional[str] = None
    payment_method: Optional[str] = None


@dataclass
class RiskFactors:
    """Profile factors, each 0-100 where higher means lower risk"""

    account_age: float
    transaction_history: float
    verification_level: float
    behavioral_consistency: float = 50.0
    network_reputation: float = 50.0


@dataclass
class HistoricalAnalysis:
    """Behavioral baseline summarised from a user's confirmed transactions"""

    average_transaction_amount: float
    transaction_frequency: int
    preferred_payment_methods: List[str] = field(default_factory=list)
    typical_transaction_hours: List[int] = field(default_factory=list)
    geolocation_patterns: List[str] = field(default_factory=list)


@dataclass
class UserRiskProfile:
    """Persisted per-user risk baseline"""

    user_id: str
    risk_score: float
    risk_level: RiskLevel
    factors: RiskFactors
    historical_analysis: HistoricalAnalysis
    last_updated: datetime
    flags: List[str] = field(default_factory=list)


@dataclass
class FraudIndicator:
    """Single suspicious signal emitted by a detector"""

    type: IndicatorType
    severity: Severity
    description: str
    evidence: Dict[str, Any]
    confidence: float
    weight: int
    rule: str


@dataclass
class AnalysisMetadata:
    analysis_timestamp: datetime
    model_version: str
    processing_time_ms: float


@dataclass
class FraudAnalysisResult:
    """Outcome of one transaction analysis, persisted once for audit"""

    transaction_id: str
    user_id: str
    risk_score: float
    risk_level: RiskLevel
    indicators: List[FraudIndicator]
    recommendation: Recommendation
    confidence: float
    metadata: AnalysisMetadata


@dataclass
class KnownDevice:
    fingerprint: str
    last_seen: datetime


@dataclass
class IPReputation:
    """Verdict from the IP reputation collaborator"""

    is_malicious: bool = False
    is_proxy: bool = False
    is_vpn: bool = False
    is_tor: bool = False
    categories: List[str] = field(default_factory=list)


@dataclass
class AccountSnapshot:
    """Account attributes needed to bootstrap a risk profile"""

    user_id: str
    created_at: Optional[datetime] = None
    kyc_status: Optional[str] = None


@dataclass
class BlockRecord:
    """Block written by the enforcement trigger for downstream enforcement"""

    transaction_id: str
    user_id: str
    risk_score: float
    indicator_types: List[str]
    created_at: datetime
    reason: str = "fraud_detection"
    status: str = "blocked"


@dataclass
class RiskStatistics:
    """Aggregate view over stored analyses within a time range"""

    total_analyses: int
    risk_distribution: Dict[str, int]
    blocked_count: int
    false_positive_rate: float = 0.0
