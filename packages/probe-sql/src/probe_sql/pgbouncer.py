"""
PgBouncer clients.

A PgBouncer pool is probed by logging into it with the backend database's
credentials, so the resulting client is a PostgresClient connected to the
pooler instead of the server. Pool replicas are checked one client per pod
through the replica fan-out.
"""

import logging

from probe_core.constants import DEFAULT_BACKEND_DB_TYPE, PGBOUNCER_PORT, SSLMode
from probe_core.credentials import resolve_credential
from probe_core.errors import CredentialMissingError
from probe_core.fanout import gather_replicas
from probe_core.secrets import SecretStore
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_protocols import Credential, DatabaseRef
from probe_sql.dsn import ConnectionParams
from probe_sql.postgres import PostgresClient, connect_checked

logger = logging.getLogger(__name__)


class PgBouncerClientBuilder:
    """
    Builds connectivity-checked clients for a PgBouncer pool.

    Args:
        pgbouncer: The pooler. Supplies name, namespace and governing service.
        secrets: Secret store.
        backend: The backend database the pool fronts. Its auth_secret
            supplies the login unless auth is given, and its database is
            the default database name.
        auth: Explicit backend login. Ignored unless both username and
            password are non-empty.
        backend_db_type: Backend engine; only "postgres" is supported.
        backend_db_name: Database to connect to; defaults to the backend's.
        port: Pool listening port; defaults to 5432.

    Raises:
        ValueError: If backend_db_type is not supported.

    Example:
        builder = PgBouncerClientBuilder(pb, store, backend=pg)
        clients = await builder.build_replicas(3)
    """

    def __init__(
        self,
        pgbouncer: DatabaseRef,
        secrets: SecretStore,
        *,
        backend: DatabaseRef | None = None,
        auth: Credential | None = None,
        backend_db_type: str = "",
        backend_db_name: str = "",
        port: int | None = None,
        settings: ProbeSettings | None = None,
    ) -> None:
        db_type = backend_db_type or DEFAULT_BACKEND_DB_TYPE
        if db_type != DEFAULT_BACKEND_DB_TYPE:
            raise ValueError(f"unsupported backend database type: {db_type!r}")

        self.pgbouncer = pgbouncer
        self.secrets = secrets
        self.backend = backend
        self.auth = auth if auth is not None and auth.username and auth.password else None
        self.backend_db_type = db_type
        self.backend_db_name = backend_db_name or (backend.database if backend is not None else "")
        self.port = port if port is not None else PGBOUNCER_PORT
        self.settings = settings or default_settings

    async def backend_auth(self) -> Credential:
        """
        Resolve the login used against the pool.

        Raises:
            CredentialMissingError: If no explicit auth was given and the
                backend secret is unreferenced, unreadable or incomplete.
        """
        if self.auth is not None:
            return self.auth
        if self.backend is None:
            raise CredentialMissingError(
                None,
                detail=f"there is no backend database reference for pgbouncer "
                f"{self.pgbouncer.namespace}/{self.pgbouncer.name}",
            )
        return await resolve_credential(self.secrets, self.backend.auth_secret)

    def host(self, pod: str | None = None, url: str | None = None) -> str:
        if url:
            return url
        suffix = self.settings.cluster_domain_suffix
        if pod:
            return self.pgbouncer.pod_host(pod, suffix)
        return self.pgbouncer.service_host(suffix)

    async def build(self, pod: str | None = None, url: str | None = None) -> PostgresClient:
        """
        Build a client for one pool pod or an explicit host.

        Raises:
            CredentialMissingError: If the backend login cannot be resolved.
            ConnectivityError: If connecting or SELECT 1 fails.
        """
        credential = await self.backend_auth()
        params = ConnectionParams(
            user=credential.username,
            password=credential.password,
            host=self.host(pod, url),
            port=self.port,
            dbname=self.backend_db_name,
            sslmode=SSLMode.DISABLE,
            connect_timeout=self.settings.sql_connect_timeout,
        )
        client = await connect_checked(params)
        logger.debug(f"Built pgbouncer client for {client.address}")
        return client

    async def build_replicas(self, replicas: int) -> list[PostgresClient]:
        """
        Build one client per pool replica, pods "{name}-0" .. "{name}-{n-1}".

        Raises:
            PartialListError: If any replica failed. Clients built for the
                other replicas travel on the exception.
        """
        pods = self.pgbouncer.replica_pods(replicas)
        return await gather_replicas(pods, lambda pod: self.build(pod=pod))
