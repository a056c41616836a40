"""
libpq key=value connection strings.

Connection parameters are collected in a ConnectionParams value and only
rendered to a DSN at connect time. DSNs embed the password, so they are
never logged as-is; redact_dsn() masks it when a DSN has to appear in a
message.
"""

import re
from dataclasses import dataclass, field

from probe_core.constants import SSL_MODES_NORMALIZED_TO_REQUIRE, SSLMode
from probe_core.tls import TLSFiles

_NEEDS_QUOTING = re.compile(r"[\s'\\]")
_PASSWORD_FIELD = re.compile(r"(password=)('(?:[^'\\]|\\.)*'|\S*)")


def quote_value(value: str) -> str:
    """
    Quote a conninfo value the way libpq expects.

    Empty values and values containing whitespace, single quotes or
    backslashes are wrapped in single quotes, with quotes and backslashes
    escaped by a backslash.
    """
    if value and not _NEEDS_QUOTING.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def normalize_ssl_mode(mode: str | SSLMode) -> SSLMode:
    """
    Map a configured sslmode to the one used for connecting.

    "prefer" and "allow" become "require".

    Raises:
        ValueError: If the mode is not a libpq sslmode.
    """
    ssl_mode = SSLMode(mode)
    if ssl_mode in SSL_MODES_NORMALIZED_TO_REQUIRE:
        return SSLMode.REQUIRE
    return ssl_mode


def redact_dsn(dsn: str) -> str:
    """Return the DSN with its password value replaced by "****"."""
    return _PASSWORD_FIELD.sub(r"\1****", dsn)


@dataclass(frozen=True)
class ConnectionParams:
    """
    Everything needed to open one relational connection.

    Attributes:
        user: Login user.
        password: Login password; kept out of repr().
        host: Host name or address.
        port: Port number.
        dbname: Database to connect to.
        sslmode: Effective sslmode (already normalized).
        connect_timeout: Connect timeout in seconds.
    """

    user: str
    password: str = field(repr=False)
    host: str
    port: int
    dbname: str
    sslmode: SSLMode = SSLMode.DISABLE
    connect_timeout: int = 10

    def to_dsn(self, tls: TLSFiles | None = None, client_cert: bool = False) -> str:
        """
        Render the libpq DSN.

        Args:
            tls: Materialized TLS files. When given, sslrootcert points at
                the CA file.
            client_cert: Also pass sslcert/sslkey (certificate client auth).
        """
        pairs: list[tuple[str, str]] = [
            ("user", self.user),
            ("password", self.password),
            ("host", self.host),
            ("port", str(self.port)),
            ("connect_timeout", str(self.connect_timeout)),
            ("dbname", self.dbname),
            ("sslmode", self.sslmode.value),
        ]
        if tls is not None:
            pairs.append(("sslrootcert", tls.ca))
            if client_cert:
                pairs.append(("sslcert", tls.cert))
                pairs.append(("sslkey", tls.key))

        return " ".join(f"{key}={quote_value(value)}" for key, value in pairs)
