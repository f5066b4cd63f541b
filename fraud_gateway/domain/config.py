"""Static detection options consumed by the engine"""

from dataclasses import dataclass, field
from typing import FrozenSet

DEFAULT_HIGH_RISK_COUNTRIES = frozenset({"CN", "RU", "KP", "IR", "SY", "AF"})


@dataclass(frozen=True)
class VelocityThresholds:
    max_transactions_per_hour: int = 10
    max_amount_per_hour: int = 500_000  # 5,000.00
    max_amount_per_day: int = 1_000_000  # 10,000.00
    spike_multiplier: float = 3.0


@dataclass(frozen=True)
class BehaviorThresholds:
    suspicious_amount_multiplier: float = 5.0
    critical_amount_ratio: float = 10.0
    typical_hour_tolerance: int = 2
    min_history_for_withdrawal: int = 5
    high_risk_countries: FrozenSet[str] = DEFAULT_HIGH_RISK_COUNTRIES


@dataclass(frozen=True)
class RiskThresholds:
    """Score cutoffs; anything below medium is low"""

    low: float = 25.0
    medium: float = 50.0
    high: float = 75.0
    critical: float = 90.0


@dataclass(frozen=True)
class BlockingPolicy:
    enabled: bool = True
    auto_block_threshold: float = 85.0
    account_flag_threshold: float = 90.0
    require_manual_review: bool = True


@dataclass(frozen=True)
class DetectionConfig:
    """Full option set. Immutable once the engine is built."""

    velocity: VelocityThresholds = field(default_factory=VelocityThresholds)
    behavior: BehaviorThresholds = field(default_factory=BehaviorThresholds)
    risk: RiskThresholds = field(default_factory=RiskThresholds)
    blocking: BlockingPolicy = field(default_factory=BlockingPolicy)
    enable_anomaly_detection: bool = True
    enable_pattern_recognition: bool = True
    detector_timeout_seconds: float = 0.5
    model_version: str = "1.0.0"
