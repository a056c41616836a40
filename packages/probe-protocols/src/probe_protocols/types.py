"""
Generic types for the probe protocol system.

This module defines the data structures shared by every store family:
database identity, credentials, health results and async action records.
These are internal types, not API models - response payloads are parsed
into pydantic models inside each family package and converted to these.

All types use @dataclass. Inputs (DatabaseRef, Credential) are frozen so a
build call can never mutate what the caller handed in.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class SecretRef:
    """
    Reference to a secret-like key-value object.

    Attributes:
        namespace: Namespace the secret lives in.
        name: Secret name.
    """

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class DatabaseRef:
    """
    Namespace-qualified identity and network location of a data store.

    Hosts are derived from the governing service naming convention unless
    the caller supplies an explicit URL override at build time.

    Attributes:
        name: Database object name. Replica pods are named "{name}-{i}".
        namespace: Namespace the database runs in.
        governing_service: Headless service that gives pods stable DNS names.
        port: Port the store listens on.
        scheme: "http" or "https" for HTTP-speaking stores.
        security_enabled: Whether clients must authenticate.
        auth_secret: Secret holding username/password, if any.
        tls_secret: Secret holding tls.crt/tls.key/ca.crt, if transport
            encryption with client authentication is required.
        database: Target database name for relational stores.
        version: Engine version string (e.g. "7.17.10").
        auth_plugin: Auth-plugin discriminator (e.g. "X-Pack", "OpenSearch").

    Example:
        ref = DatabaseRef(name="es", namespace="demo", governing_service="es-pods",
                          port=9200, scheme="https")
        ref.pod_host("es-0")   # "es-0.es-pods.demo.svc"
    """

    name: str
    namespace: str
    governing_service: str
    port: int
    scheme: str = "http"
    security_enabled: bool = True
    auth_secret: SecretRef | None = None
    tls_secret: SecretRef | None = None
    database: str = ""
    version: str = ""
    auth_plugin: str = ""

    def pod_host(self, pod: str, domain_suffix: str = "svc") -> str:
        """Return the stable DNS name of a single pod."""
        return f"{pod}.{self.governing_service}.{self.namespace}.{domain_suffix}"

    def service_host(self, domain_suffix: str = "svc") -> str:
        """Return the DNS name of the governing service itself."""
        return f"{self.governing_service}.{self.namespace}.{domain_suffix}"

    def url_for(self, host: str) -> str:
        """Return "{scheme}://{host}:{port}"."""
        return f"{self.scheme}://{host}:{self.port}"

    def replica_pods(self, replicas: int) -> list[str]:
        """Return the pod names of a replica set, "{name}-0" to "{name}-{n-1}"."""
        return [f"{self.name}-{i}" for i in range(replicas)]


@dataclass(frozen=True)
class Credential:
    """
    Username and password pair resolved from an auth secret.

    The password is kept out of repr() so credentials never leak into logs
    or exception messages by accident.
    """

    username: str
    password: str = field(repr=False)


class HealthState(str, Enum):
    """Normalized tri-state health signal."""

    READY = "Ready"
    DEGRADED = "Degraded"
    UNREACHABLE = "Unreachable"


@dataclass
class HealthResult:
    """
    Result of a health evaluation.

    Attributes:
        state: Normalized state.
        overall: The raw overall token the server reported (e.g. "green",
            "available"); empty when the server could not be reached.
        reasons: Sub-component identifier -> failure reason. Empty means
            fully healthy.
    """

    state: HealthState
    overall: str = ""
    reasons: dict[str, str] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        """True when the store is ready and no sub-component reports a problem."""
        return self.state == HealthState.READY and not self.reasons

    @classmethod
    def unreachable(cls, reason: str) -> "HealthResult":
        return cls(state=HealthState.UNREACHABLE, reasons={"connection": reason})


class ReadinessState(str, Enum):
    """
    Outcome of the write-then-read readiness probe.

    - UNREACHABLE: the store could not be contacted
    - NOT_PROVISIONED: reachable, readiness marker never written
    - WRITABLE: reachable, marker written and read back consistently; for a
      read-only check, a marker from an earlier write is present
    - READ_INCONSISTENT: write accepted but the marker did not read back
    """

    UNREACHABLE = "Unreachable"
    NOT_PROVISIONED = "NotProvisioned"
    WRITABLE = "Writable"
    READ_INCONSISTENT = "ReadInconsistent"


class ActionKind(str, Enum):
    """Kinds of long-running administrative actions."""

    BACKUP = "backup"
    RESTORE = "restore"
    DELETE_BACKUP = "delete"
    PURGE_BACKUP = "purge"


class ActionState(str, Enum):
    """Server-side lifecycle of an async action, as observed by polling."""

    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "notfound"

    @property
    def finished(self) -> bool:
        return self in (ActionState.COMPLETED, ActionState.FAILED)


@dataclass(frozen=True)
class AsyncAction:
    """
    A submitted long-running action, identified by a caller-chosen token.

    Only the token is kept locally; all state lives on the server and is
    observed through status polling.
    """

    token: str
    kind: ActionKind
    collection: str


@dataclass
class ActionStatus:
    """
    One poll observation of an async action.

    Attributes:
        token: The async token that was polled.
        state: Reported lifecycle state.
        message: Server-provided message, if any.
        unhealthy_collections: Collection name -> reported health, for every
            collection that was not healthy when the action completed.
    """

    token: str
    state: ActionState
    message: str = ""
    unhealthy_collections: dict[str, str] = field(default_factory=dict)
