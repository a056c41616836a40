"""
Well-known names shared by every store family.

Secret field names, readiness marker locations, default ports, endpoint
paths and admin action names all live here so that call sites never carry
ad hoc string literals.
"""

from enum import Enum


class SecretKey(str, Enum):
    """Field names read from secrets."""

    USERNAME = "username"
    PASSWORD = "password"
    TLS_CERT = "tls.crt"
    TLS_KEY = "tls.key"
    CA_CERT = "ca.crt"


# =============================================================================
# Readiness markers
# =============================================================================
# Shared by all callers of a given store type; changing them orphans markers
# written by earlier versions.

READINESS_INDEX = "kubedb-system"
READINESS_DOCUMENT_ID = "info"
READINESS_DOCUMENT_TYPE = "_doc"

READINESS_COLLECTION = "kubedb-system"
READINESS_COLLECTION_DOCUMENT_ID = "1"


# =============================================================================
# Default ports
# =============================================================================

SEARCH_REST_PORT = 9200
DASHBOARD_REST_PORT = 5601
POSTGRES_PORT = 5432
PGBOUNCER_PORT = 5432
PROXYSQL_ADMIN_PORT = 6032
SOLR_PORT = 8983
REST_PROXY_PORT = 8082


# =============================================================================
# HTTP endpoints
# =============================================================================

class SearchPath(str, Enum):
    """Search-engine REST endpoints."""

    CLUSTER_HEALTH = "/_cluster/health"
    NODES_STATS = "/_nodes/stats"
    CAT_INDICES = "/_cat/indices"
    STORE_STATS = "/_stats/store"
    CHANGE_PASSWORD = "/_security/user/{username}/_password"
    ROLE = "/_security/role/{name}"
    BULK = "/{index}/_bulk"
    DOCUMENT = "/{index}/_doc/{id}"


DASHBOARD_STATUS_PATH = "/api/status"
REST_PROXY_BROKERS_PATH = "/brokers"

SOLR_COLLECTIONS_ADMIN_PATH = "/solr/admin/collections"
SOLR_UPDATE_PATH = "/solr/{collection}/update"
SOLR_GET_PATH = "/solr/{collection}/get"


class SolrAction(str, Enum):
    """Values of the collections admin "action" parameter."""

    CLUSTER_STATUS = "CLUSTERSTATUS"
    LIST = "LIST"
    CREATE = "CREATE"
    BACKUP = "BACKUP"
    RESTORE = "RESTORE"
    DELETE_BACKUP = "DELETEBACKUP"
    REQUEST_STATUS = "REQUESTSTATUS"
    DELETE_STATUS = "DELETESTATUS"


class SolrParam(str, Enum):
    """Query parameter names of the collections admin API."""

    ACTION = "action"
    NAME = "name"
    COLLECTION = "collection"
    LOCATION = "location"
    REPOSITORY = "repository"
    BACKUP_ID = "backupId"
    ASYNC = "async"
    REQUEST_ID = "requestid"
    PURGE_UNUSED = "purgeUnused"
    NUM_SHARDS = "numShards"
    REPLICATION_FACTOR = "replicationFactor"


SOLR_HEALTHY = "GREEN"
SOLR_COMMIT_WITHIN_MS = 5000


# =============================================================================
# Healthy tokens
# =============================================================================

SEARCH_HEALTHY = "green"
DASHBOARD_HEALTHY_STATE = "green"  # schema A "state"
DASHBOARD_HEALTHY_LEVEL = "available"  # schema B "level"


# =============================================================================
# Relational stores
# =============================================================================

class SSLMode(str, Enum):
    """libpq sslmode values."""

    DISABLE = "disable"
    ALLOW = "allow"
    PREFER = "prefer"
    REQUIRE = "require"
    VERIFY_CA = "verify-ca"
    VERIFY_FULL = "verify-full"


# The driver cannot negotiate these opportunistically; connect with "require".
SSL_MODES_NORMALIZED_TO_REQUIRE = frozenset({SSLMode.ALLOW, SSLMode.PREFER})

CLIENT_AUTH_MODE_CERT = "cert"
DEFAULT_POSTGRES_DATABASE = "postgres"
DEFAULT_BACKEND_DB_TYPE = "postgres"
LIVENESS_QUERY = "SELECT 1"
