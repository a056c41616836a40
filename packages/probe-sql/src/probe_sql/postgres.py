"""
PostgreSQL clients.

PostgresClient wraps one psycopg AsyncConnection that has already answered
the liveness query. PostgresClientBuilder resolves the auth secret and the
optional client certificate, renders the DSN, connects and runs SELECT 1
before handing the client out.
"""

import logging
from dataclasses import dataclass

import psycopg

from probe_core.constants import (
    CLIENT_AUTH_MODE_CERT,
    DEFAULT_POSTGRES_DATABASE,
    LIVENESS_QUERY,
    POSTGRES_PORT,
    SSLMode,
)
from probe_core.credentials import resolve_credential
from probe_core.errors import ConnectivityError
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.tls import TLSMaterial, load_tls_material
from probe_protocols import DatabaseRef, HealthResult, HealthState
from probe_sql.dsn import ConnectionParams, normalize_ssl_mode

logger = logging.getLogger(__name__)


@dataclass
class PostgresClient:
    """
    A live PostgreSQL (or PgBouncer) connection.

    Attributes:
        conn: Open psycopg AsyncConnection.
        address: "host:port" the connection was opened against.
    """

    conn: psycopg.AsyncConnection
    address: str = ""

    async def health(self) -> HealthResult:
        """Run the liveness query; any driver error is UNREACHABLE."""
        try:
            await self.conn.execute(LIVENESS_QUERY)
        except psycopg.Error as e:
            return HealthResult.unreachable(str(e) or type(e).__name__)
        return HealthResult(state=HealthState.READY)

    async def aclose(self) -> None:
        await self.conn.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


async def connect_checked(
    params: ConnectionParams,
    tls: TLSMaterial | None = None,
    client_cert: bool = False,
) -> PostgresClient:
    """
    Open a connection and run the liveness query on it.

    TLS files exist on disk only for the duration of the connect call.

    Raises:
        ConnectivityError: If connecting or the liveness query fails. A
            connection that was opened is closed before raising.
    """
    address = f"{params.host}:{params.port}"

    try:
        if tls is not None:
            with tls.materialize() as files:
                conn = await psycopg.AsyncConnection.connect(params.to_dsn(files, client_cert))
        else:
            conn = await psycopg.AsyncConnection.connect(params.to_dsn())
    except psycopg.Error as e:
        logger.error(f"Failed to connect to {address}: {e}")
        raise ConnectivityError(address, str(e) or type(e).__name__) from e

    try:
        await conn.execute(LIVENESS_QUERY)
    except psycopg.Error as e:
        await conn.close()
        logger.error(f"Failed to run query against {address}: {e}")
        raise ConnectivityError(address, f"failed to run query: {e}") from e

    return PostgresClient(conn=conn, address=address)


class PostgresClientBuilder:
    """
    Builds a connectivity-checked PostgresClient.

    Args:
        db: The PostgreSQL database. auth_secret is mandatory; tls_secret
            names the client certificate secret when TLS is configured.
        secrets: Secret store.
        ssl_mode: Configured sslmode; "prefer" and "allow" connect as
            "require".
        client_auth_mode: "cert" adds the client certificate and key to
            the connection.
    """

    def __init__(
        self,
        db: DatabaseRef,
        secrets: SecretStore,
        *,
        ssl_mode: str | SSLMode = SSLMode.DISABLE,
        client_auth_mode: str = "",
        settings: ProbeSettings | None = None,
    ) -> None:
        self.db = db
        self.secrets = secrets
        self.ssl_mode = normalize_ssl_mode(ssl_mode)
        self.client_auth_mode = client_auth_mode
        self.settings = settings or default_settings

    def host(self, pod: str | None = None, url: str | None = None) -> str:
        if url:
            return url
        suffix = self.settings.cluster_domain_suffix
        if pod:
            return self.db.pod_host(pod, suffix)
        return self.db.service_host(suffix)

    async def build(self, pod: str | None = None, url: str | None = None) -> PostgresClient:
        """
        Build a client for one pod or an explicit host.

        Raises:
            CredentialMissingError: If the auth secret is missing or
                incomplete. Authentication is always required.
            CertificateInvalidError: If the client certificate secret is
                unusable.
            ConnectivityError: If connecting or SELECT 1 fails.
        """
        credential = await resolve_credential(self.secrets, self.db.auth_secret)

        params = ConnectionParams(
            user=credential.username,
            password=credential.password,
            host=self.host(pod, url),
            port=self.db.port or POSTGRES_PORT,
            dbname=DEFAULT_POSTGRES_DATABASE,
            sslmode=self.ssl_mode,
            connect_timeout=self.settings.sql_connect_timeout,
        )

        tls = None
        if self.db.tls_secret is not None:
            tls = await load_tls_material(self.secrets, self.db.tls_secret)

        client = await connect_checked(
            params,
            tls=tls,
            client_cert=self.client_auth_mode == CLIENT_AUTH_MODE_CERT,
        )
        logger.debug(f"Built PostgresClient for {client.address}")
        return client
