"""
Shared machinery for building and probing store clients.

This package holds everything the store family packages have in common:

- constants: secret field names, marker locations, ports, endpoint paths
- errors: the ProbeError taxonomy
- settings: ProbeSettings (environment-overridable timeouts)
- secrets / credentials / tls: resolving what a client authenticates with
- version: table-driven version to protocol-variant resolution
- transport: httpx client factory and error mapping
- fanout: partial-failure tolerant replica construction
- readiness: the write-then-read readiness protocol
"""

from probe_core.credentials import credential_from_secret, resolve_credential
from probe_core.errors import (
    ActionRejectedError,
    CertificateInvalidError,
    ConnectivityError,
    CredentialMissingError,
    CredentialSyncError,
    MarkerNotFoundError,
    PartialListError,
    ProbeError,
    ProbeHTTPError,
    ReadRejectedError,
    ResponseParseError,
    SecretNotFoundError,
    TransportError,
    UnsupportedVersionError,
    WriteRejectedError,
)
from probe_core.fanout import gather_replicas
from probe_core.readiness import document_matches, probe_readiness
from probe_core.secrets import InMemorySecretStore, SecretData, SecretStore
from probe_core.settings import ProbeSettings, settings
from probe_core.tls import TLSFiles, TLSMaterial, load_tls_material
from probe_core.transport import HttpClientHandle, create_http_client
from probe_core.version import (
    VARIANT_TABLE,
    AuthPlugin,
    SemVer,
    Variant,
    VariantRule,
    parse_version,
    resolve_variant,
)

__all__ = [
    # Errors
    "ProbeError",
    "ActionRejectedError",
    "CertificateInvalidError",
    "ConnectivityError",
    "CredentialMissingError",
    "CredentialSyncError",
    "MarkerNotFoundError",
    "PartialListError",
    "ProbeHTTPError",
    "ReadRejectedError",
    "ResponseParseError",
    "SecretNotFoundError",
    "TransportError",
    "UnsupportedVersionError",
    "WriteRejectedError",
    # Configuration
    "ProbeSettings",
    "settings",
    # Secrets, credentials, TLS
    "SecretData",
    "SecretStore",
    "InMemorySecretStore",
    "credential_from_secret",
    "resolve_credential",
    "TLSFiles",
    "TLSMaterial",
    "load_tls_material",
    # Versions
    "AuthPlugin",
    "SemVer",
    "Variant",
    "VariantRule",
    "VARIANT_TABLE",
    "parse_version",
    "resolve_variant",
    # Transport
    "HttpClientHandle",
    "create_http_client",
    # Fan-out and readiness
    "gather_replicas",
    "probe_readiness",
    "document_matches",
]
