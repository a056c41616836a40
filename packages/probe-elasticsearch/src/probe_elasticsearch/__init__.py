"""
Search-engine cluster clients for store probing.

- ElasticsearchClientBuilder: staged, connectivity-checked construction
- ElasticsearchClientV1: 0.x-7.x and OpenSearch 1.x/2.x wire protocol
- ElasticsearchClientV2: 8.x wire protocol, adds store size and roles
- Pydantic response types for the endpoints the clients read
"""

from probe_elasticsearch.builder import ElasticsearchClientBuilder
from probe_elasticsearch.client import (
    CLIENT_VARIANTS,
    ElasticsearchClientV1,
    ElasticsearchClientV2,
)
from probe_elasticsearch.types import (
    BulkResponse,
    ClusterHealthResponse,
    GetDocumentResponse,
    StoreStatsResponse,
)

__all__ = [
    # Builder
    "ElasticsearchClientBuilder",
    # Clients
    "CLIENT_VARIANTS",
    "ElasticsearchClientV1",
    "ElasticsearchClientV2",
    # Response types
    "BulkResponse",
    "ClusterHealthResponse",
    "GetDocumentResponse",
    "StoreStatsResponse",
]
