"""Network detector: IP reputation signals"""

from typing import List

from fraud_gateway.domain.detectors.base import DetectionContext
from fraud_gateway.domain.models import FraudIndicator
from fraud_gateway.domain.rules import build_indicator


async def detect_network(ctx: DetectionContext) -> List[FraudIndicator]:
    ip = ctx.transaction.source.ip
    reputation = await ctx.ip_reputation.check(ip)
    indicators = []

    if reputation.is_malicious:
        indicators.append(
            build_indicator(
                "network_malicious_ip",
                "Transaction from known malicious IP",
                {"ip": ip, "reputation": reputation.categories},
            )
        )

    if reputation.is_proxy or reputation.is_vpn:
        service_type = "VPN" if reputation.is_vpn else "proxy"
        indicators.append(
            build_indicator(
                "network_anonymizing_proxy",
                f"Transaction through {service_type}",
                {"ip": ip, "service_type": service_type},
            )
        )

    if reputation.is_tor:
        indicators.append(
            build_indicator("network_tor_exit", "Transaction through Tor network", {"ip": ip})
        )

    return indicators
