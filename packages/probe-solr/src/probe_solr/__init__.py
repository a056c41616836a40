"""
Solr cluster probing and async admin actions.

- SolrClientBuilder: builds a CLUSTERSTATUS-checked client
- SolrClient: collections, readiness probe, backup/restore/delete/purge
  submission, status polling and flushing
- decode_backup_response: flattens Solr name/value lists
"""

from probe_solr.builder import SolrClientBuilder
from probe_solr.client import SolrClient, action_token, decode_backup_response
from probe_solr.types import (
    ClusterStatusResponse,
    ListCollectionsResponse,
    RealtimeGetResponse,
    RequestStatusResponse,
    SolrResponse,
)

__all__ = [
    "SolrClientBuilder",
    "SolrClient",
    "action_token",
    "decode_backup_response",
    "ClusterStatusResponse",
    "ListCollectionsResponse",
    "RealtimeGetResponse",
    "RequestStatusResponse",
    "SolrResponse",
]
