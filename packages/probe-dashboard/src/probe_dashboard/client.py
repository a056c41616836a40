"""
Dashboard clients.

The dashboard has a single capability: its status endpoint, evaluated
into a HealthResult. The two variants differ only in which payload schema
they parse, so both are thin wrappers selecting from STATUS_PARSERS.
"""

from dataclasses import dataclass

from probe_core.constants import DASHBOARD_STATUS_PATH
from probe_core.errors import TransportError
from probe_core.transport import HttpClientHandle, decode_json, transport_errors
from probe_core.version import Variant
from probe_dashboard.health import STATUS_PARSERS
from probe_protocols import HealthResult


@dataclass(frozen=True)
class DashboardClientV1(HttpClientHandle):
    """
    Dashboard client for the 7.x status schema.

    Example:
        client = await DashboardClientBuilder(dashboard, search, store).build()
        result = await client.health()
        if not result.healthy:
            print(result.reasons)
    """

    variant: Variant = Variant.V1

    async def health(self) -> HealthResult:
        """
        Fetch and evaluate the dashboard status.

        The body is evaluated whatever the status code: an unavailable
        dashboard answers 503 with the same payload.

        Returns:
            READY, DEGRADED with per-component reasons, or UNREACHABLE.

        Raises:
            ResponseParseError: If the body is not JSON or misses a
                required field.
        """
        try:
            with transport_errors("dashboard status"):
                response = await self.http.get(DASHBOARD_STATUS_PATH)
        except TransportError as e:
            return HealthResult.unreachable(str(e))

        payload = decode_json(response, "dashboard status")
        return STATUS_PARSERS[self.variant](payload)


@dataclass(frozen=True)
class DashboardClientV2(DashboardClientV1):
    """Dashboard client for the 8.x status schema."""

    variant: Variant = Variant.V2


CLIENT_VARIANTS: dict[Variant, type[DashboardClientV1]] = {
    Variant.V1: DashboardClientV1,
    Variant.V2: DashboardClientV2,
}
