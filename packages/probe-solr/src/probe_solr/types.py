"""
Solr response types.

Every Solr response carries a responseHeader whose "status" is 0 on
success, independently of the HTTP status. Models below cover the
collections admin API and the real-time get handler.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResponseHeader(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: int
    qtime: int = Field(default=0, alias="QTime")


class ErrorBody(BaseModel):
    msg: str = ""
    code: int = 0


class SolrResponse(BaseModel):
    """Fields common to every Solr JSON response."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    response_header: ResponseHeader = Field(alias="responseHeader")
    error: ErrorBody | None = None


# =============================================================================
# Collections admin API
# =============================================================================


class CollectionState(BaseModel):
    """One collection in CLUSTERSTATUS. Only "health" is consulted."""

    model_config = ConfigDict(extra="allow")

    health: str


class ClusterInfo(BaseModel):
    collections: dict[str, CollectionState]
    live_nodes: list[str] = Field(default_factory=list)


class ClusterStatusResponse(SolrResponse):
    """
    Response from action=CLUSTERSTATUS.

    Example response:
    {
        "responseHeader": {"status": 0, "QTime": 3},
        "cluster": {
            "collections": {"kubedb-system": {"health": "GREEN", "shards": {...}}},
            "live_nodes": ["solr-0:8983_solr"]
        }
    }
    """

    cluster: ClusterInfo


class ListCollectionsResponse(SolrResponse):
    """Response from action=LIST."""

    collections: list[str]


class RequestStatusBody(BaseModel):
    state: str
    msg: str = ""


class RequestStatusResponse(SolrResponse):
    """
    Response from action=REQUESTSTATUS.

    Example response:
    {
        "responseHeader": {"status": 0, "QTime": 1},
        "status": {"state": "completed", "msg": "found [coll-backup] in completed tasks"}
    }
    """

    status: RequestStatusBody


# =============================================================================
# Documents
# =============================================================================


class RealtimeGetResponse(BaseModel):
    """
    Response from GET /solr/{collection}/get?id=...

    "doc" is null when no document with that id exists.
    """

    model_config = ConfigDict(extra="allow")

    doc: dict[str, Any] | None
