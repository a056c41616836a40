"""
Search-engine cluster clients.

Two wire-protocol variants share one implementation:

- ElasticsearchClientV1: 0.x-7.x and OpenSearch 1.x/2.x. Bulk headers
  carry the "_type" of the readiness document.
- ElasticsearchClientV2: 8.x. Mapping types are gone, so the bulk header
  omits "_type". Adds store-size and role-management capabilities.

Each client is a frozen HttpClientHandle around an httpx.AsyncClient whose
base_url is the node or service address. Clients are produced by
ElasticsearchClientBuilder, which has already checked connectivity.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from probe_core.constants import (
    READINESS_DOCUMENT_ID,
    READINESS_DOCUMENT_TYPE,
    READINESS_INDEX,
    SEARCH_HEALTHY,
    SearchPath,
)
from probe_core.credentials import credential_from_secret
from probe_core.errors import (
    CredentialSyncError,
    MarkerNotFoundError,
    ProbeHTTPError,
    ReadRejectedError,
    ResponseParseError,
    TransportError,
    WriteRejectedError,
)
from probe_core.secrets import SecretData
from probe_core.transport import (
    HttpClientHandle,
    decode_json,
    parse_model,
    transport_errors,
)
from probe_core.version import Variant
from probe_elasticsearch.types import (
    BulkResponse,
    ClusterHealthResponse,
    GetDocumentResponse,
    StoreStatsResponse,
)
from probe_protocols import Credential, HealthResult, HealthState

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"


@dataclass(frozen=True)
class ElasticsearchClientV1(HttpClientHandle):
    """
    Search-engine client for the 7.x-compatible wire protocol.

    Attributes:
        http: httpx.AsyncClient bound to the cluster address.
        address: The address the client was built for.
        credential: Credential in use, or None when security is disabled.
        variant: Always Variant.V1.

    Example:
        async with await builder.build(pod="es-0") as client:
            status = await client.cluster_status()
    """

    variant: Variant = Variant.V1

    # -------------------------------------------------------------------------
    # Cluster information
    # -------------------------------------------------------------------------

    async def _get_json(self, path: str, operation: str, **kwargs: Any) -> Any:
        with transport_errors(operation):
            response = await self.http.get(path, **kwargs)
        if not response.is_success:
            raise ProbeHTTPError(operation, response.status_code)
        return decode_json(response, operation)

    async def cluster_health(self) -> dict[str, Any]:
        """
        Get the raw cluster health document.

        Raises:
            TransportError: If the cluster could not be reached.
            ProbeHTTPError: On a non-success status.
            ResponseParseError: If the body is not a JSON object.
        """
        payload = await self._get_json(SearchPath.CLUSTER_HEALTH.value, "cluster health")
        if not isinstance(payload, dict):
            raise ResponseParseError("cluster health", "expected a JSON object", payload=payload)
        return payload

    async def nodes_stats(self) -> dict[str, Any]:
        """Get per-node statistics as returned by GET /_nodes/stats."""
        payload = await self._get_json(SearchPath.NODES_STATS.value, "nodes stats")
        if not isinstance(payload, dict):
            raise ResponseParseError("nodes stats", "expected a JSON object", payload=payload)
        return payload

    async def list_indices(self) -> list[dict[str, Any]]:
        """List indices with their cat-API summary, one dict per index."""
        payload = await self._get_json(
            SearchPath.CAT_INDICES.value,
            "list indices",
            params={"format": "json"},
        )
        if not isinstance(payload, list):
            raise ResponseParseError("list indices", "expected a JSON array", payload=payload)
        return payload

    async def cluster_status(self) -> str:
        """
        Get the cluster status token ("green", "yellow" or "red").

        Raises:
            ResponseParseError: If "status" is missing or not a string.
        """
        health = parse_model(ClusterHealthResponse, await self.cluster_health(), "cluster status")
        return health.status

    async def health(self) -> HealthResult:
        """
        Evaluate cluster health.

        Green is ready. Yellow and red are degraded, with the unassigned
        shard count as the reason. An error status is degraded with the
        status code as the reason. Transport failures are reported as
        UNREACHABLE rather than raised.
        """
        try:
            payload = await self.cluster_health()
        except TransportError as e:
            return HealthResult.unreachable(str(e))
        except ProbeHTTPError as e:
            return HealthResult(
                state=HealthState.DEGRADED,
                reasons={"status": f"status code {e.status_code}"},
            )

        health = parse_model(ClusterHealthResponse, payload, "cluster health")
        if health.status == SEARCH_HEALTHY:
            return HealthResult(state=HealthState.READY, overall=health.status)

        return HealthResult(
            state=HealthState.DEGRADED,
            overall=health.status,
            reasons={"cluster": f"{health.status},{health.unassigned_shards} unassigned shards"},
        )

    # -------------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------------

    async def sync_credential(self, credential: Credential) -> None:
        """
        Set a user's password to the one in the given credential.

        Raises:
            CredentialSyncError: On a transport failure or non-success status.
        """
        path = SearchPath.CHANGE_PASSWORD.value.format(username=credential.username)
        try:
            response = await self.http.put(path, json={"password": credential.password})
        except httpx.RequestError as e:
            logger.error(f"Failed to send change password request for {credential.username}")
            raise CredentialSyncError(credential.username, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise CredentialSyncError(
                credential.username,
                f"status code {response.status_code}",
            )
        logger.debug(f"Synced password of user {credential.username}")

    async def sync_credential_from_secret(self, data: SecretData, secret_name: str = "") -> None:
        """Validate the secret's username and password, then sync them."""
        await self.sync_credential(credential_from_secret(data, secret_name))

    # -------------------------------------------------------------------------
    # Readiness probe
    # -------------------------------------------------------------------------

    def _bulk_header(self) -> dict[str, Any]:
        return {"index": {"_id": READINESS_DOCUMENT_ID, "_type": READINESS_DOCUMENT_TYPE}}

    async def write_probe(self, document: Mapping[str, Any]) -> None:
        """
        Index the readiness marker through the bulk API.

        Raises:
            TransportError: If the request could not be sent.
            WriteRejectedError: On a non-success status, or when the bulk
                response reports errors.
            ResponseParseError: If the "errors" flag is missing or not a bool.
        """
        body = json.dumps(self._bulk_header()) + "\n" + json.dumps(dict(document)) + "\n"
        path = SearchPath.BULK.value.format(index=READINESS_INDEX)

        with transport_errors("write probe"):
            response = await self.http.post(
                path,
                content=body.encode("utf-8"),
                headers={"Content-Type": NDJSON_CONTENT_TYPE},
            )

        if not response.is_success:
            raise WriteRejectedError(response.status_code)

        payload = decode_json(response, "write probe")
        result = parse_model(BulkResponse, payload, "write probe")
        if result.errors:
            raise WriteRejectedError(response.status_code, response=payload)

    async def read_probe(self) -> dict[str, Any]:
        """
        Read the readiness marker back.

        Returns:
            The marker's "_source" body.

        Raises:
            TransportError: If the request could not be sent.
            MarkerNotFoundError: If the marker (or its index) does not exist.
            ReadRejectedError: On any other non-success status.
        """
        path = SearchPath.DOCUMENT.value.format(index=READINESS_INDEX, id=READINESS_DOCUMENT_ID)

        with transport_errors("read probe"):
            response = await self.http.get(path)

        if response.status_code == httpx.codes.NOT_FOUND:
            raise MarkerNotFoundError(f"{READINESS_INDEX}/{READINESS_DOCUMENT_ID}")
        if not response.is_success:
            raise ReadRejectedError(response.status_code)

        document = parse_model(GetDocumentResponse, decode_json(response, "read probe"), "read probe")
        return document.source


@dataclass(frozen=True)
class ElasticsearchClientV2(ElasticsearchClientV1):
    """
    Search-engine client for the 8.x wire protocol.

    Everything ElasticsearchClientV1 does, plus total disk usage and
    role management.
    """

    variant: Variant = Variant.V2

    def _bulk_header(self) -> dict[str, Any]:
        return {"index": {"_id": READINESS_DOCUMENT_ID}}

    async def total_disk_usage(self) -> int:
        """
        Total on-disk store size of all indices, in bytes.

        Raises:
            ResponseParseError: If _all.total.store.size_in_bytes is missing.
        """
        payload = await self._get_json(SearchPath.STORE_STATS.value, "store stats")
        stats = parse_model(StoreStatsResponse, payload, "store stats")
        return stats.all.total.store.size_in_bytes

    async def ensure_user_role(self, name: str, body: Mapping[str, Any]) -> None:
        """
        Create or update a security role.

        Args:
            name: Role name.
            body: Role definition (cluster/indices privileges).

        Raises:
            TransportError: If the request could not be sent.
            ProbeHTTPError: On a non-success status.
        """
        operation = f"ensure role {name}"
        with transport_errors(operation):
            response = await self.http.put(
                SearchPath.ROLE.value.format(name=name),
                json=dict(body),
            )
        if not response.is_success:
            raise ProbeHTTPError(operation, response.status_code)
        logger.debug(f"Ensured role {name}")


CLIENT_VARIANTS: dict[Variant, type[ElasticsearchClientV1]] = {
    Variant.V1: ElasticsearchClientV1,
    Variant.V2: ElasticsearchClientV2,
}
