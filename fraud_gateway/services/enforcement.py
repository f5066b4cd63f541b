"""Real-time enforcement: block records and account review flags"""

import logging
from datetime import datetime

from fraud_gateway.domain.config import BlockingPolicy
from fraud_gateway.domain.models import BlockRecord, FraudAnalysisResult
from fraud_gateway.domain.ports import AccountFlagger, BlockRecordStore
from fraud_gateway.infrastructure.observability.metrics import block_counter, enforcement_failure_counter

logger = logging.getLogger(__name__)


class EnforcementTrigger:
    """Writes enforcement records once a result crosses the auto-block threshold"""

    def __init__(self, policy: BlockingPolicy, blocks: BlockRecordStore, accounts: AccountFlagger):
        self.policy = policy
        self.blocks = blocks
        self.accounts = accounts

    def should_block(self, result: FraudAnalysisResult) -> bool:
        return self.policy.enabled and result.risk_score >= self.policy.auto_block_threshold

    async def apply(self, result: FraudAnalysisResult, now: datetime) -> bool:
        """
        Persist a block record and, for the highest scores, flag the account.

        Never raises: a failed write must not mask the analysis result.

        Returns:
            True if a block record was written
        """
        if not self.should_block(result):
            return False

        logger.warning(
            "Executing real-time fraud block",
            extra={
                "transaction_id": result.transaction_id,
                "user_id": result.user_id,
                "risk_score": result.risk_score,
                "indicator_count": len(result.indicators),
            },
        )

        try:
            await self.blocks.put(
                BlockRecord(
                    transaction_id=result.transaction_id,
                    user_id=result.user_id,
                    risk_score=result.risk_score,
                    indicator_types=[i.type.value for i in result.indicators],
                    created_at=now,
                )
            )
            block_counter.inc()

            if self.policy.require_manual_review and result.risk_score >= self.policy.account_flag_threshold:
                await self.accounts.flag_for_review(result.user_id, now)

        except Exception as e:
            enforcement_failure_counter.inc()
            logger.error(
                f"Failed to execute real-time block: {e}",
                extra={"transaction_id": result.transaction_id},
            )
            return False

        return True
