"""
Tests for the Solr client: health, readiness probe and async actions.

HTTP is served by FakeSolr through httpx.MockTransport. It keeps async
task state the way Solr does: submitted tokens are reported as running
until completed, DELETESTATUS forgets them, and unknown tokens poll as
notfound.
"""

import json

import httpx
import pytest

from probe_core.errors import (
    ActionRejectedError,
    MarkerNotFoundError,
    ReadRejectedError,
    ResponseParseError,
    WriteRejectedError,
)
from probe_core.readiness import probe_readiness
from probe_protocols import (
    ActionKind,
    ActionState,
    AsyncActionCapability,
    HealthCheckCapability,
    HealthState,
    ListIndicesCapability,
    ReadinessProbeCapability,
    ReadinessState,
)
from probe_solr.client import SolrClient, action_token, decode_backup_response

OK_HEADER = {"status": 0, "QTime": 1}


class FakeSolr:
    """In-memory stand-in for the collections admin API and the marker collection."""

    def __init__(self, collections: dict[str, str] | None = None) -> None:
        self.collections = collections if collections is not None else {"kubedb-system": "GREEN"}
        self.tasks: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.marker: dict | None = None
        self.marker_collection_exists = True
        self.update_status = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/solr/admin/collections":
            return self._admin(request)
        if path == "/solr/kubedb-system/update":
            if self.update_status != 0:
                return httpx.Response(200, json={"responseHeader": {"status": self.update_status}})
            doc = json.loads(request.content)["add"]["doc"]
            # Solr stores non-id fields as multi-valued unless the schema says otherwise.
            self.marker = {k: v if k == "id" else [v] for k, v in doc.items()}
            self.marker["_version_"] = 1780000000000000000
            return httpx.Response(200, json={"responseHeader": OK_HEADER})
        if path == "/solr/kubedb-system/get":
            if not self.marker_collection_exists:
                return httpx.Response(404, text="<html>Not Found</html>")
            return httpx.Response(200, json={"doc": self.marker})
        return httpx.Response(404, json={})

    def _admin(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        action = params["action"]

        if action == "CLUSTERSTATUS":
            return httpx.Response(
                200,
                json={
                    "responseHeader": OK_HEADER,
                    "cluster": {
                        "collections": {
                            name: {"health": health, "shards": {}}
                            for name, health in self.collections.items()
                        },
                        "live_nodes": ["solr-0:8983_solr"],
                    },
                },
            )
        if action == "LIST":
            return httpx.Response(
                200, json={"responseHeader": OK_HEADER, "collections": list(self.collections)}
            )
        if action == "CREATE":
            self.collections[params["name"]] = "GREEN"
            return httpx.Response(200, json={"responseHeader": OK_HEADER})
        if action in ("BACKUP", "RESTORE", "DELETEBACKUP"):
            token = params["async"]
            if token in self.tasks:
                return httpx.Response(
                    400,
                    json={
                        "responseHeader": {"status": 400, "QTime": 0},
                        "error": {"msg": f"Task with the same requestid already exists. ({token})", "code": 400},
                    },
                )
            self.tasks[token] = "running"
            return httpx.Response(200, json={"responseHeader": OK_HEADER, "requestid": token})
        if action == "REQUESTSTATUS":
            token = params["requestid"]
            state = self.tasks.get(token, "notfound")
            return httpx.Response(
                200,
                json={
                    "responseHeader": OK_HEADER,
                    "status": {"state": state, "msg": f"found [{token}] in {state} tasks"},
                },
            )
        if action == "DELETESTATUS":
            self.tasks.pop(params["requestid"], None)
            return httpx.Response(200, json={"responseHeader": OK_HEADER, "status": "successfully removed"})
        return httpx.Response(400, json={"responseHeader": {"status": 400}, "error": {"msg": "Unknown action"}})

    def admin_requests(self, action: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.url.path == "/solr/admin/collections" and r.url.params["action"] == action
        ]


def make_client(solr: FakeSolr) -> SolrClient:
    http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(solr))
    return SolrClient(http=http, address="http://solr:8983")


def refusing_client() -> SolrClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(handler))
    return SolrClient(http=http, address="http://solr:8983")


class TestActionToken:
    def test_tokens(self):
        assert action_token("books", ActionKind.BACKUP) == "books-backup"
        assert action_token("books", ActionKind.RESTORE) == "books-restore"
        assert action_token("books", ActionKind.DELETE_BACKUP) == "books-delete"
        assert action_token("books", ActionKind.PURGE_BACKUP, "snap-1") == "books-purge-snap-1"


class TestDecodeBackupResponse:
    def test_pairs(self):
        payload = {"response": ["collection", "books", "backupId", 3, "indexFileCount", 12]}
        assert decode_backup_response(payload, "books") == {
            "collection": "books",
            "backupId": 3,
            "indexFileCount": 12,
        }

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"response": {"collection": "books"}},
            {"response": ["collection", "books", "backupId"]},
            {"response": [7, "books"]},
        ],
    )
    def test_malformed(self, payload):
        with pytest.raises(ResponseParseError):
            decode_backup_response(payload, "books")


class TestClusterInformation:
    @pytest.mark.asyncio
    async def test_list_collections(self):
        solr = FakeSolr({"books": "GREEN", "films": "YELLOW"})
        assert await make_client(solr).list_collections() == ["books", "films"]

    @pytest.mark.asyncio
    async def test_list_indices(self):
        solr = FakeSolr({"books": "GREEN", "films": "YELLOW"})
        assert await make_client(solr).list_indices() == [
            {"name": "books", "health": "GREEN"},
            {"name": "films", "health": "YELLOW"},
        ]

    @pytest.mark.asyncio
    async def test_create_collection(self):
        solr = FakeSolr({})
        await make_client(solr).create_collection()

        request = solr.admin_requests("CREATE")[0]
        assert request.method == "POST"
        assert request.url.params["name"] == "kubedb-system"
        assert request.url.params["numShards"] == "1"
        assert request.url.params["replicationFactor"] == "1"
        assert "kubedb-system" in solr.collections

    @pytest.mark.asyncio
    async def test_unknown_action_is_rejected(self):
        """A non-success answer carries Solr's error message."""

        def handler(request):
            return httpx.Response(
                400,
                json={"responseHeader": {"status": 400}, "error": {"msg": "Could not find collection : nope"}},
            )

        http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(handler))
        with pytest.raises(ActionRejectedError) as exc_info:
            await SolrClient(http=http).list_collections()
        assert exc_info.value.status == 400
        assert "Could not find collection" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_zero_header_status_is_rejected(self):
        def handler(request):
            return httpx.Response(
                200, json={"responseHeader": {"status": 500}, "error": {"msg": "boom"}}
            )

        http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(handler))
        with pytest.raises(ActionRejectedError) as exc_info:
            await SolrClient(http=http).cluster_state()
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_html_error_page(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(handler))
        with pytest.raises(ActionRejectedError) as exc_info:
            await SolrClient(http=http).cluster_state()
        assert exc_info.value.status == 502


class TestHealth:
    @pytest.mark.asyncio
    async def test_all_green(self):
        result = await make_client(FakeSolr({"books": "GREEN", "kubedb-system": "GREEN"})).health()
        assert result.state == HealthState.READY
        assert result.overall == "GREEN"
        assert result.reasons == {}

    @pytest.mark.asyncio
    async def test_unhealthy_collections_are_reasons(self):
        solr = FakeSolr({"books": "GREEN", "films": "YELLOW", "music": "RED"})
        result = await make_client(solr).health()
        assert result.state == HealthState.DEGRADED
        assert result.overall == "RED"
        assert result.reasons == {"films": "YELLOW", "music": "RED"}

    @pytest.mark.asyncio
    async def test_transport_failure_is_unreachable(self):
        result = await refusing_client().health()
        assert result.state == HealthState.UNREACHABLE


class TestReadinessProbe:
    @pytest.mark.asyncio
    async def test_write_request(self):
        solr = FakeSolr()
        await make_client(solr).write_probe({"datetime": "2026-10-19T10:00:00Z"})

        request = solr.requests[-1]
        assert request.method == "POST"
        assert json.loads(request.content) == {
            "add": {
                "doc": {"datetime": "2026-10-19T10:00:00Z", "id": "1"},
                "overwrite": True,
                "commitWithin": 5000,
            }
        }

    @pytest.mark.asyncio
    async def test_write_rejected_by_header(self):
        solr = FakeSolr()
        solr.update_status = 400
        with pytest.raises(WriteRejectedError):
            await make_client(solr).write_probe({"datetime": "now"})

    @pytest.mark.asyncio
    async def test_marker_never_written(self):
        """A null doc is a missing marker, not an empty one."""
        with pytest.raises(MarkerNotFoundError):
            await make_client(FakeSolr()).read_probe()

    @pytest.mark.asyncio
    async def test_marker_collection_missing(self):
        solr = FakeSolr()
        solr.marker_collection_exists = False
        with pytest.raises(MarkerNotFoundError):
            await make_client(solr).read_probe()

    @pytest.mark.asyncio
    async def test_read_rejected(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        http = httpx.AsyncClient(base_url="http://solr:8983", transport=httpx.MockTransport(handler))
        with pytest.raises(ReadRejectedError):
            await SolrClient(http=http).read_probe()

    @pytest.mark.asyncio
    async def test_read_uses_realtime_get(self):
        solr = FakeSolr()
        client = make_client(solr)
        await client.write_probe({"datetime": "now"})
        doc = await client.read_probe()

        request = solr.requests[-1]
        assert request.url.path == "/solr/kubedb-system/get"
        assert request.url.params["id"] == "1"
        assert doc["id"] == "1"

    @pytest.mark.asyncio
    async def test_readiness_with_multi_valued_fields(self):
        client = make_client(FakeSolr())
        assert await probe_readiness(client) == ReadinessState.NOT_PROVISIONED
        assert await probe_readiness(client, {"datetime": "2026-10-19T10:00:00Z"}) == ReadinessState.WRITABLE
        assert await probe_readiness(client) == ReadinessState.WRITABLE

    @pytest.mark.asyncio
    async def test_readiness_unreachable(self):
        assert await probe_readiness(refusing_client(), {"datetime": "now"}) == ReadinessState.UNREACHABLE


class TestAsyncActions:
    @pytest.mark.asyncio
    async def test_backup_request(self):
        solr = FakeSolr({"books": "GREEN"})
        action = await make_client(solr).backup_collection("books", "nightly", "/backup", "s3")

        assert action.token == "books-backup"
        assert action.kind == ActionKind.BACKUP
        assert action.collection == "books"
        request = solr.admin_requests("BACKUP")[0]
        assert request.method == "POST"
        assert dict(request.url.params) == {
            "action": "BACKUP",
            "name": "nightly",
            "collection": "books",
            "location": "/backup",
            "repository": "s3",
            "async": "books-backup",
        }

    @pytest.mark.asyncio
    async def test_restore_request(self):
        solr = FakeSolr({"books": "GREEN"})
        action = await make_client(solr).restore_collection("books", "nightly", "/backup", "s3", 4)

        assert action.token == "books-restore"
        request = solr.admin_requests("RESTORE")[0]
        assert request.method == "POST"
        assert request.url.params["backupId"] == "4"

    @pytest.mark.asyncio
    async def test_delete_backup_request(self):
        solr = FakeSolr({"books": "GREEN"})
        action = await make_client(solr).delete_backup("nightly", "books", "/backup", "s3", 2, snapshot="snap")

        assert action.token == "books-delete-snap"
        request = solr.admin_requests("DELETEBACKUP")[0]
        assert request.method == "DELETE"
        assert request.url.params["backupId"] == "2"
        assert "purgeUnused" not in request.url.params

    @pytest.mark.asyncio
    async def test_purge_backup_request(self):
        solr = FakeSolr({"books": "GREEN"})
        action = await make_client(solr).purge_backup("nightly", "books", "/backup", "s3")

        assert action.token == "books-purge"
        request = solr.admin_requests("DELETEBACKUP")[0]
        assert request.method == "PUT"
        assert request.url.params["purgeUnused"] == "true"

    @pytest.mark.asyncio
    async def test_lifecycle(self):
        """Submit, observe running, complete, flush, then the token is unknown."""
        solr = FakeSolr({"books": "GREEN"})
        client = make_client(solr)

        action = await client.backup_collection("books", "nightly", "/backup", "s3")
        status = await client.poll_action(action.token)
        assert status.state == ActionState.RUNNING
        assert not status.state.finished

        solr.tasks[action.token] = "completed"
        status = await client.poll_action(action.token)
        assert status.state == ActionState.COMPLETED
        assert status.state.finished
        assert status.unhealthy_collections == {}

        await client.flush_status(action.token)
        assert (await client.poll_action(action.token)).state == ActionState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_flush_is_idempotent(self):
        client = make_client(FakeSolr())
        await client.flush_status("books-backup")
        await client.flush_status("books-backup")
        assert (await client.request_status("books-backup")).state == ActionState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_duplicate_submission_rejected(self):
        """At most one action of each kind is in flight per collection."""
        solr = FakeSolr({"books": "GREEN"})
        client = make_client(solr)
        await client.backup_collection("books", "nightly", "/backup", "s3")
        with pytest.raises(ActionRejectedError):
            await client.backup_collection("books", "nightly", "/backup", "s3")

        await client.flush_status("books-backup")
        await client.backup_collection("books", "nightly", "/backup", "s3")

    @pytest.mark.asyncio
    async def test_completed_with_unhealthy_collection_is_failed(self):
        solr = FakeSolr({"books": "GREEN", "films": "YELLOW"})
        client = make_client(solr)
        action = await client.restore_collection("books", "nightly", "/backup", "s3", 1)
        solr.tasks[action.token] = "completed"

        status = await client.poll_action(action.token)
        assert status.state == ActionState.FAILED
        assert status.unhealthy_collections == {"films": "YELLOW"}
        assert status.message == "health for collections films is not green"

    @pytest.mark.asyncio
    async def test_failed_action_skips_health_check(self):
        solr = FakeSolr({"books": "GREEN"})
        client = make_client(solr)
        action = await client.backup_collection("books", "nightly", "/backup", "s3")
        solr.tasks[action.token] = "failed"

        assert (await client.poll_action(action.token)).state == ActionState.FAILED
        assert solr.admin_requests("CLUSTERSTATUS") == []

    @pytest.mark.asyncio
    async def test_unknown_state(self):
        solr = FakeSolr()
        solr.tasks["books-backup"] = "exploded"
        with pytest.raises(ResponseParseError):
            await make_client(solr).request_status("books-backup")


class TestProtocolCompliance:
    def test_capabilities(self):
        client = SolrClient(http=httpx.AsyncClient())
        for capability in (
            HealthCheckCapability,
            ListIndicesCapability,
            ReadinessProbeCapability,
            AsyncActionCapability,
        ):
            assert isinstance(client, capability), capability.__name__
