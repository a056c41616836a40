"""Environment-based configuration for client builders."""

from pydantic_settings import BaseSettings


class ProbeSettings(BaseSettings):
    """Transport and naming settings shared by all builders.

    All settings can be overridden via environment variables with
    PROBE_ prefix. For example:
        PROBE_CONNECT_TIMEOUT=10
        PROBE_CLUSTER_DOMAIN_SUFFIX=svc.cluster.local
    """

    # HTTP transport, seconds
    connect_timeout: float = 30.0
    idle_timeout: float = 3.0  # keep-alive expiry of idle pooled connections
    request_timeout: float = 30.0

    # Relational drivers, seconds
    sql_connect_timeout: int = 10

    # Suffix appended to "{pod}.{service}.{namespace}"
    cluster_domain_suffix: str = "svc"

    model_config = {"env_prefix": "PROBE_"}


settings = ProbeSettings()
