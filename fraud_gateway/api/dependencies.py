"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from fraud_gateway.config import settings
from fraud_gateway.infrastructure.cache.profile_cache import ProfileCache
from fraud_gateway.infrastructure.clients.ip_reputation import IPReputationClient
from fraud_gateway.infrastructure.database.repositories import (
    AccountRepository,
    AnalysisRepository,
    BlockRepository,
    DeviceRepository,
    RiskProfileRepository,
    TransactionHistoryRepository,
)
from fraud_gateway.infrastructure.database.session import get_session_factory
from fraud_gateway.services.engine import FraudDetectionEngine
from fraud_gateway.services.enforcement import EnforcementTrigger

# Shared across requests; the store stays authoritative
profile_cache = ProfileCache(
    ttl_seconds=settings.profile_cache_ttl_seconds,
    max_entries=settings.profile_cache_max_entries,
)

detection_config = settings.detection_config()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ip_reputation_client() -> IPReputationClient:
    """Provide IP reputation client instance"""
    return IPReputationClient()


def get_profile_cache() -> ProfileCache:
    return profile_cache


def get_engine(
    session_factory: sessionmaker = Depends(get_session_factory),
    ip_reputation: IPReputationClient = Depends(get_ip_reputation_client),
    cache: ProfileCache = Depends(get_profile_cache),
) -> FraudDetectionEngine:
    """Wire the engine to repositories sharing one session factory"""
    accounts = AccountRepository(session_factory)
    return FraudDetectionEngine(
        config=detection_config,
        history=TransactionHistoryRepository(session_factory),
        profiles=RiskProfileRepository(session_factory),
        analyses=AnalysisRepository(session_factory),
        devices=DeviceRepository(session_factory),
        ip_reputation=ip_reputation,
        accounts=accounts,
        enforcement=EnforcementTrigger(detection_config.blocking, BlockRepository(session_factory), accounts),
        cache=cache,
    )
