"""
Capability protocols for store clients.

Each capability is its own Protocol. A client variant implements the subset
it supports; callers check for exactly the capability they need, either
statically (type hints) or at runtime with isinstance(), which works because
every protocol is @runtime_checkable.

Adding a capability never forces existing variants to grow: older, narrower
clients simply do not satisfy the new protocol.

Example:
    if isinstance(client, TotalDiskUsageCapability):
        used = await client.total_disk_usage()
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from probe_protocols.types import (
    ActionStatus,
    Credential,
    HealthResult,
)


@runtime_checkable
class ClusterHealthCapability(Protocol):
    """Raw cluster health payload."""

    async def cluster_health(self) -> dict[str, Any]:
        ...


@runtime_checkable
class NodeStatsCapability(Protocol):
    """Per-node statistics payload."""

    async def nodes_stats(self) -> dict[str, Any]:
        ...


@runtime_checkable
class ListIndicesCapability(Protocol):
    """Listing of indices (or collections) held by the cluster."""

    async def list_indices(self) -> list[dict[str, Any]]:
        ...


@runtime_checkable
class ListBrokersCapability(Protocol):
    """Listing of broker ids reachable through a proxy."""

    async def list_brokers(self) -> list[int]:
        ...


@runtime_checkable
class ClusterStatusCapability(Protocol):
    """Overall cluster status string (e.g. "green")."""

    async def cluster_status(self) -> str:
        ...


@runtime_checkable
class CredentialSyncCapability(Protocol):
    """Push an updated password for a specific user to the store."""

    async def sync_credential(self, credential: Credential) -> None:
        ...


@runtime_checkable
class TotalDiskUsageCapability(Protocol):
    """Total bytes stored across the cluster."""

    async def total_disk_usage(self) -> int:
        ...


@runtime_checkable
class EnsureUserRoleCapability(Protocol):
    """Create or update a named role."""

    async def ensure_user_role(self, name: str, body: Mapping[str, Any]) -> None:
        ...


@runtime_checkable
class WriteProbeCapability(Protocol):
    """Write the readiness marker document (idempotent)."""

    async def write_probe(self, document: Mapping[str, Any]) -> None:
        ...


@runtime_checkable
class ReadProbeCapability(Protocol):
    """Read back the readiness marker document."""

    async def read_probe(self) -> dict[str, Any]:
        ...


@runtime_checkable
class HealthCheckCapability(Protocol):
    """Normalized health evaluation."""

    async def health(self) -> HealthResult:
        ...


@runtime_checkable
class AsyncActionCapability(Protocol):
    """
    Poll-based async action protocol.

    Submission methods are store specific; every implementation can report
    and discard the status of a token.
    """

    async def request_status(self, token: str) -> ActionStatus:
        ...

    async def poll_action(self, token: str) -> ActionStatus:
        ...

    async def flush_status(self, token: str) -> None:
        ...


@runtime_checkable
class ReadinessProbeCapability(WriteProbeCapability, ReadProbeCapability, Protocol):
    """Both halves of the write-then-read consistency probe."""


__all__ = [
    "AsyncActionCapability",
    "ClusterHealthCapability",
    "ClusterStatusCapability",
    "CredentialSyncCapability",
    "EnsureUserRoleCapability",
    "HealthCheckCapability",
    "ListBrokersCapability",
    "ListIndicesCapability",
    "NodeStatsCapability",
    "ReadProbeCapability",
    "ReadinessProbeCapability",
    "TotalDiskUsageCapability",
    "WriteProbeCapability",
]
