"""Builder for Solr cluster clients, checked with CLUSTERSTATUS."""

import logging

import httpx

from probe_core.constants import SOLR_COLLECTIONS_ADMIN_PATH, SolrAction, SolrParam
from probe_core.credentials import resolve_credential
from probe_core.errors import ConnectivityError
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.tls import load_tls_material
from probe_core.transport import create_http_client
from probe_protocols import DatabaseRef
from probe_solr.client import SolrClient

logger = logging.getLogger(__name__)


class SolrClientBuilder:
    """
    Builds a connectivity-checked SolrClient.

    Example:
        builder = SolrClientBuilder(db, secret_store)
        async with await builder.build() as client:
            print(await client.list_collections())
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
            response = await http.get(
                SOLR_COLLECTIONS_ADMIN_PATH,
                params={SolrParam.ACTION.value: SolrAction.CLUSTER_STATUS.value},
            )
        except httpx.RequestError as e:
            logger.error(f"Failed to connect to {address}: {e}")
            raise ConnectivityError(address, str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"CLUSTERSTATUS against {address} returned {response.status_code}")
            raise ConnectivityError(address, f"status code {response.status_code}")

    async def build(self, pod: str | None = None, url: str | None = None) -> SolrClient:
        """
        Build a client for one pod, an explicit URL, or the service.

        Raises:
            CredentialMissingError: If security is enabled and credentials
                cannot be resolved.
            CertificateInvalidError: If the TLS secret is unusable.
            ConnectivityError: If CLUSTERSTATUS fails.
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

        http = create_http_client(
            address,
            credential=credential,
            ssl_context=ssl_context,
            settings=self.settings,
            transport=self.transport,
        )

        try:
            await self._check_connectivity(http, address)
        except BaseException:
            await http.aclose()
            raise

        logger.debug(f"Built SolrClient for {address}")
        return SolrClient(http=http, address=address, credential=credential)
