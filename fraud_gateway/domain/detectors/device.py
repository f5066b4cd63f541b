"""Device detector: unrecognized fingerprints and automation user agents"""

import hashlib
import re
from typing import List

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator, TransactionSource
from fraud_gateway.domain.rules import build_indicator

SUSPICIOUS_USER_AGENT = re.compile(
    r"curl|wget|python|bot|crawler|scraper|postman|insomnia|httpclient|headless",
    re.IGNORECASE,
)


def generate_device_fingerprint(source: TransactionSource) -> str:
    """SHA-256 over the device attributes that are present"""
    components = [c for c in (source.user_agent, source.device) if c]
    return hashlib.sha256("|".join(components).encode("utf-8")).hexdigest()


def is_suspicious_user_agent(user_agent: str) -> bool:
    return SUSPICIOUS_USER_AGENT.search(user_agent) is not None


async def detect_device(ctx: DetectionContext) -> List[FraudIndicator]:
    source = ctx.transaction.source
    if not source.user_agent:
        return []

    indicators = []
    fingerprint = generate_device_fingerprint(source)
    known_devices = await ctx.devices.list_devices(ctx.transaction.user_id)

    if not any(device.fingerprint == fingerprint for device in known_devices):
        indicators.append(
            build_indicator(
                "device_unrecognized",
                "Transaction from unrecognized device",
                {"device_fingerprint": fingerprint, "known_device_count": len(known_devices)},
            )
        )

    if is_suspicious_user_agent(source.user_agent):
        indicators.append(
            build_indicator(
                "device_suspicious_user_agent",
                "Suspicious user agent detected",
                {"user_agent": source.user_agent},
            )
        )

    return indicators
