"""IP reputation HTTP client used by the network detector"""

import httpx
from fraud_gateway.domain.models import IPReputation
from fraud_gateway.domain.exceptions import IPReputationError
from fraud_gateway.config import settings
from fraud_gateway.infrastructure.observability.metrics import ip_reputation_failure_counter


class IPReputationClient:
    """Client for the external IP intelligence API"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.ip_reputation_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def check(self, ip: str) -> IPReputation:
        """
        Look up reputation flags for an IP address.

        Raises:
            IPReputationError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/ip/{ip}")
                response.raise_for_status()
                data = response.json()

                return IPReputation(
                    is_malicious=bool(data["is_malicious"]),
                    is_proxy=bool(data.get("is_proxy", False)),
                    is_vpn=bool(data.get("is_vpn", False)),
                    is_tor=bool(data.get("is_tor", False)),
                    categories=list(data.get("categories", [])),
                )

            except httpx.TimeoutException as e:
                ip_reputation_failure_counter.inc()
                raise IPReputationError(f"IP reputation timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                ip_reputation_failure_counter.inc()
                raise IPReputationError(f"IP reputation error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                ip_reputation_failure_counter.inc()
                raise IPReputationError(f"IP reputation unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                ip_reputation_failure_counter.inc()
                raise IPReputationError(f"Invalid reputation data: {e}") from e
