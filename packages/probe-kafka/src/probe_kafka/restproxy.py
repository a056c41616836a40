"""
Kafka REST proxy client.

The REST proxy is healthy when it can list at least one broker: a proxy
that is up but sees no brokers cannot serve a single request.
"""

from dataclasses import dataclass

from probe_core.constants import REST_PROXY_BROKERS_PATH
from probe_core.errors import ProbeHTTPError, TransportError
from probe_core.transport import (
    HttpClientHandle,
    decode_json,
    parse_model,
    transport_errors,
)
from probe_kafka.types import BrokerListResponse
from probe_protocols import HealthResult, HealthState

NO_BROKERS_REASON = "no brokers found to serve request"


@dataclass(frozen=True)
class RestProxyClient(HttpClientHandle):
    """
    Client for a Kafka REST proxy.

    Example:
        client = await RestProxyClientBuilder(proxy, store).build()
        brokers = await client.list_brokers()
    """

    async def list_brokers(self) -> list[int]:
        """
        List the broker ids the proxy can reach.

        Raises:
            TransportError: If the proxy could not be reached.
            ProbeHTTPError: If the proxy did not answer 200.
            ResponseParseError: If "brokers" is missing or malformed.
        """
        with transport_errors("list brokers"):
            response = await self.http.get(REST_PROXY_BROKERS_PATH)
        if response.status_code != 200:
            raise ProbeHTTPError("list brokers", response.status_code)

        payload = decode_json(response, "list brokers")
        return parse_model(BrokerListResponse, payload, "list brokers").brokers

    async def health(self) -> HealthResult:
        """
        UNREACHABLE when the proxy cannot be contacted. DEGRADED when it
        answers with an error status or lists no brokers.
        """
        try:
            brokers = await self.list_brokers()
        except TransportError as e:
            return HealthResult.unreachable(str(e))
        except ProbeHTTPError as e:
            return HealthResult(
                state=HealthState.DEGRADED,
                reasons={"status": f"status code {e.status_code}"},
            )

        if not brokers:
            return HealthResult(
                state=HealthState.DEGRADED,
                reasons={"brokers": NO_BROKERS_REASON},
            )
        return HealthResult(state=HealthState.READY)
