"""
Builder for dashboard clients.

A dashboard is addressed through its own service and authenticates with
the credentials of the search cluster it fronts. The wire variant follows
the search cluster's version. No request is sent at build time; the
status call is itself the connectivity check.
"""

import logging

import httpx

from probe_core.credentials import resolve_credential
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.tls import load_tls_material
from probe_core.transport import create_http_client
from probe_core.version import resolve_variant
from probe_dashboard.client import CLIENT_VARIANTS, DashboardClientV1
from probe_protocols import DatabaseRef

logger = logging.getLogger(__name__)


class DashboardClientBuilder:
    """
    Builds a DashboardClientV1 or V2.

    Args:
        dashboard: The dashboard's own ref. Its tls_secret names the
            server certificate secret used when scheme is "https".
        search: The backing search cluster. Supplies security_enabled,
            auth_secret, version and auth_plugin.
        secrets: Secret store.
    """

    def __init__(
        self,
        dashboard: DatabaseRef,
        search: DatabaseRef,
        secrets: SecretStore,
        *,
        settings: ProbeSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.dashboard = dashboard
        self.search = search
        self.secrets = secrets
        self.settings = settings or default_settings
        self.transport = transport

    def address(self, url: str | None = None) -> str:
        if url:
            return url
        return self.dashboard.url_for(
            self.dashboard.service_host(self.settings.cluster_domain_suffix)
        )

    async def build(self, url: str | None = None) -> DashboardClientV1:
        """
        Build a dashboard client.

        Raises:
            CredentialMissingError: If the search cluster has security
                enabled and its credentials cannot be resolved.
            CertificateInvalidError: If the server certificate secret is
                unusable.
            UnsupportedVersionError: If no variant matches the version.
        """
        address = self.address(url)

        ssl_context = None
        if self.dashboard.scheme == "https" and self.dashboard.tls_secret is not None:
            material = await load_tls_material(self.secrets, self.dashboard.tls_secret)
            ssl_context = material.ssl_context()

        credential = await resolve_credential(
            self.secrets,
            self.search.auth_secret,
            security_enabled=self.search.security_enabled,
        )

        variant = resolve_variant(self.search.version, self.search.auth_plugin)

        http = create_http_client(
            address,
            credential=credential,
            ssl_context=ssl_context,
            headers={"Accept": "application/json"},
            settings=self.settings,
            transport=self.transport,
        )

        client_class = CLIENT_VARIANTS[variant]
        logger.debug(f"Built {client_class.__name__} for {address}")
        return client_class(http=http, address=address, credential=credential, variant=variant)
