"""
Builder for search-engine cluster clients.

build() runs the staged pipeline: resolve the address, resolve credentials,
load TLS material, pick the protocol variant, then open the transport and
check connectivity with GET /_cluster/health. Every stage fails fast; a
client is only returned once the cluster has answered.
"""

import logging

import httpx

from probe_core.constants import SearchPath
from probe_core.credentials import resolve_credential
from probe_core.errors import ConnectivityError
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.tls import load_tls_material
from probe_core.transport import create_http_client
from probe_core.version import resolve_variant
from probe_elasticsearch.client import CLIENT_VARIANTS, ElasticsearchClientV1
from probe_protocols import DatabaseRef

logger = logging.getLogger(__name__)


class ElasticsearchClientBuilder:
    """
    Builds a connectivity-checked ElasticsearchClientV1 or V2.

    The variant follows from the DatabaseRef's version and auth plugin.
    Without TLS material the server certificate is not verified.

    Example:
        builder = ElasticsearchClientBuilder(db, secret_store)
        async with await builder.build(pod="es-0") as client:
            print(await client.health())
    """

    def __init__(
        self,
        db: DatabaseRef,
        secrets: SecretStore,
        *,
        settings: ProbeSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.db = db
        self.secrets = secrets
        self.settings = settings or default_settings
        self.transport = transport

    def address(self, pod: str | None = None, url: str | None = None) -> str:
        if url:
            return url
        suffix = self.settings.cluster_domain_suffix
        if pod:
            return self.db.url_for(self.db.pod_host(pod, suffix))
        return self.db.url_for(self.db.service_host(suffix))

    async def _check_connectivity(self, http: httpx.AsyncClient, address: str) -> None:
        try:
            response = await http.get(SearchPath.CLUSTER_HEALTH.value)
        except httpx.RequestError as e:
            logger.error(f"Failed to connect to {address}: {e}")
            raise ConnectivityError(address, str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"Health check against {address} returned {response.status_code}")
            raise ConnectivityError(address, f"status code {response.status_code}")

    async def build(self, pod: str | None = None, url: str | None = None) -> ElasticsearchClientV1:
        """
        Build a client for one pod, an explicit URL, or the service.

        Args:
            pod: Pod name to target through the governing service.
            url: Explicit address; takes precedence over pod.

        Returns:
            ElasticsearchClientV1 or ElasticsearchClientV2.

        Raises:
            CredentialMissingError: If security is enabled and credentials
                cannot be resolved.
            CertificateInvalidError: If the TLS secret is unusable.
            UnsupportedVersionError: If no variant matches the version.
            ConnectivityError: If the cluster did not answer the health check.
        """
        address = self.address(pod, url)

        credential = await resolve_credential(
            self.secrets,
            self.db.auth_secret,
            security_enabled=self.db.security_enabled,
        )

        ssl_context = None
        if self.db.scheme == "https" and self.db.tls_secret is not None:
            material = await load_tls_material(self.secrets, self.db.tls_secret)
            ssl_context = material.ssl_context()

        variant = resolve_variant(self.db.version, self.db.auth_plugin)

        http = create_http_client(
            address,
            credential=credential,
            ssl_context=ssl_context,
            verify=False,
            settings=self.settings,
            transport=self.transport,
        )

        try:
            await self._check_connectivity(http, address)
        except BaseException:
            await http.aclose()
            raise

        client_class = CLIENT_VARIANTS[variant]
        logger.debug(f"Built {client_class.__name__} for {address}")
        return client_class(http=http, address=address, credential=credential, variant=variant)
