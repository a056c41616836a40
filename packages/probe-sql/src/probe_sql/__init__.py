"""
Relational store and SQL proxy probing.

- PostgresClientBuilder / PostgresClient: PostgreSQL over psycopg
- PgBouncerClientBuilder: PgBouncer pools, with per-replica fan-out
- ProxySQLClientBuilder / ProxySQLClient: ProxySQL admin interface over aiomysql
- ConnectionParams, redact_dsn: libpq DSN rendering and masking
"""

from probe_sql.dsn import (
    ConnectionParams,
    normalize_ssl_mode,
    quote_value,
    redact_dsn,
)
from probe_sql.pgbouncer import PgBouncerClientBuilder
from probe_sql.postgres import PostgresClient, PostgresClientBuilder, connect_checked
from probe_sql.proxysql import ProxySQLClient, ProxySQLClientBuilder

__all__ = [
    "ConnectionParams",
    "normalize_ssl_mode",
    "quote_value",
    "redact_dsn",
    "PgBouncerClientBuilder",
    "PostgresClient",
    "PostgresClientBuilder",
    "connect_checked",
    "ProxySQLClient",
    "ProxySQLClientBuilder",
]
