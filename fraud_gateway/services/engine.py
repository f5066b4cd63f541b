"""Fraud detection engine - orchestrates profile lifecycle, detectors, scoring and enforcement"""

import asyncio
import logging
import time
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from fraud_gateway.domain.config import DetectionConfig
from fraud_gateway.domain.detectors.base import DetectionContext, Detector
from fraud_gateway.domain.detectors.registry import DETECTORS
from fraud_gateway.domain.exceptions import InvalidTransactionError, StorageError
from fraud_gateway.domain.models import (
    AnalysisMetadata,
    FraudAnalysisResult,
    FraudIndicator,
    Recommendation,
    RiskLevel,
    RiskStatistics,
    TransactionContext,
    UserRiskProfile,
)
from fraud_gateway.domain.ports import (
    AccountDirectory,
    AnalysisStore,
    DeviceStore,
    IPReputationLookup,
    RiskProfileStore,
    TransactionHistory,
)
from fraud_gateway.domain.profile import build_profile, smooth_profile
from fraud_gateway.domain.rules import build_indicator
from fraud_gateway.domain.scoring import (
    calculate_confidence,
    calculate_risk_score,
    determine_risk_level,
    generate_recommendation,
)
from fraud_gateway.infrastructure.cache.profile_cache import ProfileCache
from fraud_gateway.infrastructure.observability.logging import log_analysis
from fraud_gateway.infrastructure.observability.metrics import (
    detector_failure_counter,
    fallback_counter,
    persistence_failure_counter,
    record_analysis,
)
from fraud_gateway.services.enforcement import EnforcementTrigger
from fraud_gateway.utils.date_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

BOOTSTRAP_HISTORY_LIMIT = 100
FALLBACK_SCORE = 50.0
FALLBACK_CONFIDENCE = 0.5


def validate_transaction(context: TransactionContext) -> None:
    """
    Reject malformed input before any detector runs.

    Raises:
        InvalidTransactionError: Missing identifiers or non-positive amount
    """
    if not context.transaction_id or not context.transaction_id.strip():
        raise InvalidTransactionError("transaction_id is required")
    if not context.user_id or not context.user_id.strip():
        raise InvalidTransactionError("user_id is required")
    if isinstance(context.amount, bool) or not isinstance(context.amount, int):
        raise InvalidTransactionError("amount must be an integer number of minor units")
    if context.amount <= 0:
        raise InvalidTransactionError(f"amount must be positive, got {context.amount}")
    if not isinstance(context.timestamp, datetime):
        raise InvalidTransactionError("timestamp must be a datetime")


def safe_default_result(
    context: TransactionContext,
    error: BaseException,
    processing_time_ms: float,
    model_version: str,
    now: datetime,
) -> FraudAnalysisResult:
    """Conservative answer used whenever the analysis itself cannot complete"""
    message = str(error) or type(error).__name__
    return FraudAnalysisResult(
        transaction_id=context.transaction_id,
        user_id=context.user_id,
        risk_score=FALLBACK_SCORE,
        risk_level=RiskLevel.MEDIUM,
        indicators=[
            build_indicator("system_analysis_failure", "Fraud analysis system error", {"error": message})
        ],
        recommendation=Recommendation.REVIEW,
        confidence=FALLBACK_CONFIDENCE,
        metadata=AnalysisMetadata(
            analysis_timestamp=now,
            model_version=model_version,
            processing_time_ms=processing_time_ms,
        ),
    )


class FraudDetectionEngine:
    """
    Real-time transaction risk scoring.

    Flow per transaction:
    1. Validate the context (raises on malformed input)
    2. Load the user's profile (cache, then store, else bootstrap from history)
    3. Run every detector concurrently, each under its own timeout
    4. Aggregate indicators into score + confidence, classify
    5. Smooth the score into the profile, persist the result
    6. Enforce when the score crosses the auto-block threshold

    Steps 2-4 fail open: any error there yields the safe default result.
    Failures in steps 5-6 are logged and never change the returned result.
    """

    def __init__(
        self,
        config: DetectionConfig,
        history: TransactionHistory,
        profiles: RiskProfileStore,
        analyses: AnalysisStore,
        devices: DeviceStore,
        ip_reputation: IPReputationLookup,
        accounts: AccountDirectory,
        enforcement: EnforcementTrigger,
        cache: Optional[ProfileCache] = None,
        detectors: Optional[Dict[str, Detector]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.config = config
        self.history = history
        self.profiles = profiles
        self.analyses = analyses
        self.devices = devices
        self.ip_reputation = ip_reputation
        self.accounts = accounts
        self.enforcement = enforcement
        self.cache = cache if cache is not None else ProfileCache()
        self.detectors = detectors if detectors is not None else DETECTORS
        self.clock = clock

    async def analyze(
        self,
        context: TransactionContext,
        request_id: str = "unknown",
        timeout: Optional[float] = None,
    ) -> FraudAnalysisResult:
        """
        Score a transaction attempt.

        Args:
            context: Transaction to analyze
            request_id: Correlation id for logs
            timeout: Overall deadline in seconds for the scoring steps

        Raises:
            InvalidTransactionError: Context is malformed. Nothing else escapes.
        """
        validate_transaction(context)
        start_time = time.perf_counter()

        logger.info(
            "Starting fraud analysis",
            extra={
                "request_id": request_id,
                "transaction_id": context.transaction_id,
                "user_id": context.user_id,
                "amount": context.amount,
                "type": context.type.value,
            },
        )

        try:
            async with asyncio.timeout(timeout):
                profile = await self._get_profile(context.user_id, ensure_utc(context.timestamp))
                indicators = await self._run_detectors(
                    DetectionContext(
                        transaction=context,
                        profile=profile,
                        config=self.config,
                        history=self.history,
                        devices=self.devices,
                        ip_reputation=self.ip_reputation,
                    )
                )
            result = self._score(context, profile, indicators, start_time)

        except Exception as e:
            fallback_counter.inc()
            logger.error(
                f"Fraud analysis failed: {e!r}",
                extra={
                    "request_id": request_id,
                    "transaction_id": context.transaction_id,
                    "user_id": context.user_id,
                },
            )
            return safe_default_result(
                context,
                e,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                model_version=self.config.model_version,
                now=self.clock(),
            )

        await self._commit_profile(profile, result.risk_score)
        await self._store_result(result)
        await self.enforcement.apply(result, self.clock())

        record_analysis(result.recommendation.value, result.risk_level.value, time.perf_counter() - start_time)
        log_analysis(
            request_id=request_id,
            transaction_id=result.transaction_id,
            user_id=result.user_id,
            risk_score=result.risk_score,
            risk_level=result.risk_level.value,
            recommendation=result.recommendation.value,
            indicator_count=len(result.indicators),
            duration_ms=result.metadata.processing_time_ms,
        )
        return result

    async def get_analysis(self, transaction_id: str) -> Optional[FraudAnalysisResult]:
        return await self.analyses.get(transaction_id)

    async def get_user_risk_summary(self, user_id: str) -> UserRiskProfile:
        """Current profile for a user, bootstrapping one if none exists yet"""
        return await self._get_profile(user_id, self.clock())

    async def get_statistics(self, start: datetime, end: datetime) -> RiskStatistics:
        analyses = await self.analyses.list_between(start, end)
        distribution = Counter(a.risk_level.value for a in analyses)
        return RiskStatistics(
            total_analyses=len(analyses),
            risk_distribution=dict(distribution),
            blocked_count=sum(1 for a in analyses if a.recommendation == Recommendation.BLOCK),
        )

    def _score(
        self,
        context: TransactionContext,
        profile: UserRiskProfile,
        indicators: List[FraudIndicator],
        start_time: float,
    ) -> FraudAnalysisResult:
        thresholds = self.config.risk
        score = calculate_risk_score(indicators, profile, self.config)

        return FraudAnalysisResult(
            transaction_id=context.transaction_id,
            user_id=context.user_id,
            risk_score=score,
            risk_level=determine_risk_level(score, thresholds),
            indicators=indicators,
            recommendation=generate_recommendation(score, indicators, thresholds),
            confidence=calculate_confidence(indicators),
            metadata=AnalysisMetadata(
                analysis_timestamp=self.clock(),
                model_version=self.config.model_version,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
            ),
        )

    async def _get_profile(self, user_id: str, reference_time: datetime) -> UserRiskProfile:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        profile = await self.profiles.get(user_id)
        if profile is None:
            profile = await self._create_profile(user_id, reference_time)

        self.cache.set(profile)
        return profile

    async def _create_profile(self, user_id: str, reference_time: datetime) -> UserRiskProfile:
        account = await self.accounts.get_account(user_id)
        transactions = await self.history.list_all_confirmed(user_id, BOOTSTRAP_HISTORY_LIMIT)
        profile = build_profile(user_id, account, transactions, self.config.risk, reference_time)

        await self.profiles.put(profile)
        logger.info(
            "Created user risk profile",
            extra={"user_id": user_id, "risk_score": profile.risk_score, "history_size": len(transactions)},
        )
        return profile

    async def _run_detectors(self, ctx: DetectionContext) -> List[FraudIndicator]:
        """
        Run all detectors in one task group and concatenate their indicators
        in registry order. A detector that times out or raises contributes
        nothing, except that a storage failure aborts the analysis.
        """
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self._run_detector(name, detector, ctx))
                for name, detector in self.detectors.items()
            ]

        indicators: List[FraudIndicator] = []
        for task in tasks:
            found, storage_error = task.result()
            if storage_error is not None:
                raise storage_error
            indicators.extend(found)
        return indicators

    async def _run_detector(
        self,
        name: str,
        detector: Detector,
        ctx: DetectionContext,
    ) -> Tuple[List[FraudIndicator], Optional[StorageError]]:
        try:
            async with asyncio.timeout(self.config.detector_timeout_seconds):
                return await detector(ctx), None

        except TimeoutError:
            detector_failure_counter.labels(detector=name, reason="timeout").inc()
            logger.warning(
                f"Detector {name} timed out",
                extra={"transaction_id": ctx.transaction.transaction_id, "detector": name},
            )
        except StorageError as e:
            detector_failure_counter.labels(detector=name, reason="storage").inc()
            return [], e
        except Exception as e:
            detector_failure_counter.labels(detector=name, reason="error").inc()
            logger.error(
                f"Detector {name} failed: {e!r}",
                extra={"transaction_id": ctx.transaction.transaction_id, "detector": name},
            )

        return [], None

    async def _commit_profile(self, profile: UserRiskProfile, new_score: float) -> None:
        updated = smooth_profile(profile, new_score, self.config.risk, self.clock())
        self.cache.set(updated)
        try:
            await self.profiles.put(updated)
        except Exception as e:
            persistence_failure_counter.labels(store="profile").inc()
            logger.error(f"Failed to update user risk profile: {e}", extra={"user_id": profile.user_id})

    async def _store_result(self, result: FraudAnalysisResult) -> None:
        try:
            await self.analyses.put(result)
        except Exception as e:
            persistence_failure_counter.labels(store="analysis").inc()
            logger.error(f"Failed to store fraud analysis: {e}", extra={"transaction_id": result.transaction_id})
