"""
Search-engine REST response types.

Pydantic models for the handful of endpoints the clients read. Only fields
the clients act on are declared; everything else the server sends is kept
as extra so the raw payload can still be handed back to callers.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Cluster
# =============================================================================


class ClusterHealthResponse(BaseModel):
    """
    Response from GET /_cluster/health.

    Example response:
    {
        "cluster_name": "es",
        "status": "yellow",
        "number_of_nodes": 3,
        "unassigned_shards": 2,
        ...
    }
    """

    model_config = ConfigDict(extra="allow")

    status: str  # "green", "yellow", "red"
    cluster_name: str = ""
    number_of_nodes: int = 0
    unassigned_shards: int = 0


# =============================================================================
# Readiness probe
# =============================================================================


class BulkResponse(BaseModel):
    """
    Response from POST /{index}/_bulk.

    The "errors" flag is the only field consulted. It is declared strict so
    a string or number in its place is a parse failure, not a coerced bool.
    """

    model_config = ConfigDict(extra="allow")

    errors: bool = Field(strict=True)
    took: int = 0
    items: list[dict[str, Any]] = Field(default_factory=list)


class GetDocumentResponse(BaseModel):
    """Response from GET /{index}/_doc/{id}."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    index: str = Field(default="", alias="_index")
    id: str = Field(default="", alias="_id")
    found: bool = True
    source: dict[str, Any] = Field(alias="_source")


# =============================================================================
# Store stats (variant 2 only)
# =============================================================================
# Response structure: {"_all": {"total": {"store": {"size_in_bytes": N}}}}


class StoreSize(BaseModel):
    size_in_bytes: int


class StoreTotals(BaseModel):
    store: StoreSize


class StoreStatsAll(BaseModel):
    total: StoreTotals


class StoreStatsResponse(BaseModel):
    """Response from GET /_stats/store."""

    model_config = ConfigDict(populate_by_name=True)

    all: StoreStatsAll = Field(alias="_all")
