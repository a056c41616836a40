"""
Kafka REST proxy probing.

- RestProxyClientBuilder: builds a client for the proxy service
- RestProxyClient: broker listing and health
"""

from probe_kafka.builder import RestProxyClientBuilder
from probe_kafka.restproxy import NO_BROKERS_REASON, RestProxyClient
from probe_kafka.types import BrokerListResponse

__all__ = [
    "RestProxyClientBuilder",
    "RestProxyClient",
    "NO_BROKERS_REASON",
    "BrokerListResponse",
]
