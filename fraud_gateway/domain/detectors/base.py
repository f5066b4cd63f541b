"""Shared input for all indicator detectors"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List

from fraud_gateway.domain.config import DetectionConfig
from fraud_gateway.domain.models import FraudIndicator, TransactionContext, UserRiskProfile
from fraud_gateway.domain.ports import DeviceStore, IPReputationLookup, TransactionHistory


@dataclass(frozen=True)
class DetectionContext:
    """Everything a detector may read. Detectors never write through it."""

    transaction: TransactionContext
    profile: UserRiskProfile
    config: DetectionConfig
    history: TransactionHistory
    devices: DeviceStore
    ip_reputation: IPReputationLookup


Detector = Callable[[DetectionContext], Awaitable[List[FraudIndicator]]]
