"""
Protocol definitions for store client probing.

This package provides the capability Protocols that store client variants
implement, and the data types shared by every store family. It has zero
dependencies on other probe-* packages.

Key protocols (one per capability):
- ClusterHealthCapability, NodeStatsCapability, ClusterStatusCapability
- ListIndicesCapability, ListBrokersCapability
- CredentialSyncCapability, EnsureUserRoleCapability, TotalDiskUsageCapability
- WriteProbeCapability, ReadProbeCapability, ReadinessProbeCapability
- HealthCheckCapability, AsyncActionCapability

Key types:
- DatabaseRef, SecretRef, Credential: build inputs
- HealthState, HealthResult, ReadinessState: health signals
- AsyncAction, ActionKind, ActionState, ActionStatus: async action records
"""

from probe_protocols.capabilities import (
    AsyncActionCapability,
    ClusterHealthCapability,
    ClusterStatusCapability,
    CredentialSyncCapability,
    EnsureUserRoleCapability,
    HealthCheckCapability,
    ListBrokersCapability,
    ListIndicesCapability,
    NodeStatsCapability,
    ReadinessProbeCapability,
    ReadProbeCapability,
    TotalDiskUsageCapability,
    WriteProbeCapability,
)
from probe_protocols.types import (
    ActionKind,
    ActionState,
    ActionStatus,
    AsyncAction,
    Credential,
    DatabaseRef,
    HealthResult,
    HealthState,
    ReadinessState,
    SecretRef,
)

__all__ = [
    # Protocols
    "AsyncActionCapability",
    "ClusterHealthCapability",
    "ClusterStatusCapability",
    "CredentialSyncCapability",
    "EnsureUserRoleCapability",
    "HealthCheckCapability",
    "ListBrokersCapability",
    "ListIndicesCapability",
    "NodeStatsCapability",
    "ReadinessProbeCapability",
    "ReadProbeCapability",
    "TotalDiskUsageCapability",
    "WriteProbeCapability",
    # Data types
    "ActionKind",
    "ActionState",
    "ActionStatus",
    "AsyncAction",
    "Credential",
    "DatabaseRef",
    "HealthResult",
    "HealthState",
    "ReadinessState",
    "SecretRef",
]
