"""Builder for Kafka REST proxy clients."""

import logging

import httpx

from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.secrets import SecretStore
from probe_core.tls import load_tls_material
from probe_core.transport import create_http_client
from probe_kafka.restproxy import RestProxyClient
from probe_protocols import DatabaseRef

logger = logging.getLogger(__name__)


class RestProxyClientBuilder:
    """
    Builds a RestProxyClient bound to the proxy's service address.

    The proxy does not authenticate callers. No request is sent at build
    time; list_brokers() and health() are the connectivity check.
    """

    def __init__(
        self,
        proxy: DatabaseRef,
        secrets: SecretStore,
        *,
        settings: ProbeSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.proxy = proxy
        self.secrets = secrets
        self.settings = settings or default_settings
        self.transport = transport

    def address(self, pod: str | None = None, url: str | None = None) -> str:
        if url:
            return url
        suffix = self.settings.cluster_domain_suffix
        if pod:
            return self.proxy.url_for(self.proxy.pod_host(pod, suffix))
        return self.proxy.url_for(self.proxy.service_host(suffix))

    async def build(self, pod: str | None = None, url: str | None = None) -> RestProxyClient:
        """
        Raises:
            CertificateInvalidError: If scheme is https and the TLS secret
                is unusable.
        """
        address = self.address(pod, url)

        ssl_context = None
        if self.proxy.scheme == "https" and self.proxy.tls_secret is not None:
            material = await load_tls_material(self.secrets, self.proxy.tls_secret)
            ssl_context = material.ssl_context()

        http = create_http_client(
            address,
            ssl_context=ssl_context,
            headers={"Accept": "application/json"},
            settings=self.settings,
            transport=self.transport,
        )
        logger.debug(f"Built RestProxyClient for {address}")
        return RestProxyClient(http=http, address=address)
