"""
Exception taxonomy for client construction and health probing.

Every resolver and builder stage fails fast by raising one of these; the
only place that aggregates failures instead is the replica fan-out, which
raises PartialListError once all replicas have been attempted.

Per project patterns:
- All exceptions derive from ProbeError
- Context data is stored in attributes for error handling
- Messages name the object involved, never the secret values
"""

from typing import Any


class ProbeError(Exception):
    """Base exception for all probe errors."""


class SecretNotFoundError(ProbeError):
    """
    Raised by a SecretStore when the referenced secret does not exist.

    Attributes:
        ref: The secret reference that was looked up (as "namespace/name").
    """

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"secret {ref} not found")


class CredentialMissingError(ProbeError):
    """
    Raised when credentials are required but cannot be resolved.

    Attributes:
        secret: The secret that was consulted, or None when no secret
            reference was supplied at all.
        field: The missing field name, if a specific field is absent.
    """

    def __init__(
        self,
        secret: str | None,
        field: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.secret = secret
        self.field = field
        if detail is None:
            if secret is None:
                detail = "security is enabled but no auth secret is referenced"
            elif field is not None:
                detail = f"{field} is missing in secret {secret}"
            else:
                detail = f"failed to get auth secret {secret}"
        super().__init__(detail)


class CertificateInvalidError(ProbeError):
    """
    Raised when TLS material cannot be parsed or is incomplete.

    Attributes:
        reason: What is wrong with the material.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"invalid TLS material: {reason}")


class UnsupportedVersionError(ProbeError):
    """
    Raised when no protocol variant matches a version/plugin pair.

    Attributes:
        version: The version string that did not match.
        plugin: The auth-plugin discriminator it was paired with.
    """

    def __init__(self, version: str, plugin: str = "") -> None:
        self.version = version
        self.plugin = plugin
        message = f"unsupported version: {version!r}"
        if plugin:
            message += f" (auth plugin {plugin!r})"
        super().__init__(message)


class ConnectivityError(ProbeError):
    """
    Raised when the construction-time probe of a new client fails.

    Attributes:
        address: The address the client was bound to.
        reason: Why the probe failed (transport error or status code).
    """

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"connectivity check against {address} failed: {reason}")


class MarkerNotFoundError(ProbeError):
    """
    Raised when the readiness marker has not been written yet.

    This is the "reachable but not provisioned" signal. Callers that expect
    it should catch it explicitly; it is never raised for transport errors.

    Attributes:
        location: "{index}/{id}" of the marker that was looked up.
    """

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"readiness marker {location} not found")


class ResponseParseError(ProbeError):
    """
    Raised when a response payload is malformed or misses required keys.

    Attributes:
        operation: The operation whose response failed to parse.
        payload: The raw payload, when it was decodable.
    """

    def __init__(self, operation: str, detail: str, payload: Any = None) -> None:
        self.operation = operation
        self.payload = payload
        super().__init__(f"failed to parse response of {operation}: {detail}")


class WriteRejectedError(ProbeError):
    """
    Raised when the store explicitly reports a failed write.

    Attributes:
        status_code: HTTP status of the write response.
        response: Raw decoded response body, when available.
    """

    def __init__(self, status_code: int, response: Any = None) -> None:
        self.status_code = status_code
        self.response = response
        if response is not None:
            message = f"write request responded with error (status {status_code}): {response}"
        else:
            message = f"write request failed with status code {status_code}"
        super().__init__(message)


class ReadRejectedError(ProbeError):
    """
    Raised when a readiness read fails with a status other than not-found.

    Attributes:
        status_code: HTTP status of the read response.
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"read request failed with status code {status_code}")


class CredentialSyncError(ProbeError):
    """
    Raised when a password change for a user is not accepted.

    Attributes:
        username: The user whose password was being changed.
    """

    def __init__(self, username: str, reason: str) -> None:
        self.username = username
        super().__init__(f"failed to sync credentials of user {username}: {reason}")


class PartialListError(ProbeError):
    """
    Raised when a replica fan-out produced fewer clients than expected.

    Attributes:
        expected: Number of replicas that were attempted.
        clients: Clients that were built successfully.
        failures: Target name -> exception for every failed replica.
    """

    def __init__(
        self,
        expected: int,
        clients: list[Any],
        failures: dict[str, BaseException],
    ) -> None:
        self.expected = expected
        self.clients = clients
        self.failures = failures
        failed = ", ".join(sorted(failures)) or "none"
        super().__init__(
            f"built {len(clients)} of {expected} clients (failed: {failed})"
        )


class TransportError(ProbeError):
    """
    Raised when the transport fails below the HTTP status level.

    The original httpx exception is chained as __cause__.

    Attributes:
        operation: The operation that was being performed.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {reason}")


class ProbeHTTPError(ProbeError):
    """
    Raised when a plain read endpoint answers with a non-success status.

    Attributes:
        operation: The operation that was being performed.
        status_code: HTTP status code of the response.
    """

    def __init__(self, operation: str, status_code: int) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation} failed with status code {status_code}")


class ActionRejectedError(ProbeError):
    """
    Raised when an admin action is refused by the store.

    Attributes:
        action: The admin action name.
        status: HTTP status code, or the store's own non-zero status.
    """

    def __init__(self, action: str, status: int, detail: str = "") -> None:
        self.action = action
        self.status = status
        message = f"{action} rejected with status {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
