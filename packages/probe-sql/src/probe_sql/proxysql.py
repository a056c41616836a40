"""
ProxySQL admin-interface clients.

ProxySQL speaks the MySQL protocol on its admin port. The client logs in
with the root credentials from the auth secret and must answer SELECT 1
before it is returned.
"""

import logging
from dataclasses import dataclass

import aiomysql

from probe_core.constants import LIVENESS_QUERY, PROXYSQL_ADMIN_PORT
from probe_core.credentials import resolve_credential
from probe_core.errors import ConnectivityError
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_protocols import DatabaseRef, HealthResult, HealthState

logger = logging.getLogger(__name__)

DRIVER_ERRORS = (aiomysql.Error, OSError)


async def _run_liveness(conn: aiomysql.Connection) -> None:
    async with conn.cursor() as cur:
        await cur.execute(LIVENESS_QUERY)


@dataclass
class ProxySQLClient:
    """
    A live connection to the ProxySQL admin interface.

    Attributes:
        conn: Open aiomysql connection.
        address: "host:port" of the admin interface.
    """

    conn: aiomysql.Connection
    address: str = ""

    async def health(self) -> HealthResult:
        try:
            await _run_liveness(self.conn)
        except DRIVER_ERRORS as e:
            return HealthResult.unreachable(str(e) or type(e).__name__)
        return HealthResult(state=HealthState.READY)

    async def aclose(self) -> None:
        self.conn.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class ProxySQLClientBuilder:
    """
    Builds a connectivity-checked ProxySQLClient.

    Example:
        builder = ProxySQLClientBuilder(proxysql, store)
        async with await builder.build(pod="proxy-0") as client:
            print(await client.health())
    """

    def __init__(
        self,
        db: DatabaseRef,
        secrets: SecretStore,
        *,
        settings: ProbeSettings | None = None,
    ) -> None:
        self.db = db
        self.secrets = secrets
        self.settings = settings or default_settings

    def host(self, pod: str | None = None, url: str | None = None) -> str:
        if url:
            return url
        suffix = self.settings.cluster_domain_suffix
        if pod:
            return self.db.pod_host(pod, suffix)
        return self.db.service_host(suffix)

    async def build(self, pod: str | None = None, url: str | None = None) -> ProxySQLClient:
        """
        Build a client for one pod or an explicit host.

        Raises:
            CredentialMissingError: If the root credentials cannot be resolved.
            ConnectivityError: If connecting or SELECT 1 fails.
        """
        credential = await resolve_credential(self.secrets, self.db.auth_secret)
        host = self.host(pod, url)
        address = f"{host}:{PROXYSQL_ADMIN_PORT}"

        try:
            conn = await aiomysql.connect(
                host=host,
                port=PROXYSQL_ADMIN_PORT,
                user=credential.username,
                password=credential.password,
                connect_timeout=self.settings.sql_connect_timeout,
            )
        except DRIVER_ERRORS as e:
            logger.error(f"Failed to connect to {address}: {e}")
            raise ConnectivityError(address, str(e) or type(e).__name__) from e

        try:
            await _run_liveness(conn)
        except DRIVER_ERRORS as e:
            conn.close()
            logger.error(f"Failed to run query against {address}: {e}")
            raise ConnectivityError(address, f"failed to run query: {e}") from e

        logger.debug(f"Built ProxySQLClient for {address}")
        return ProxySQLClient(conn=conn, address=address)
