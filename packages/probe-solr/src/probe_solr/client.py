"""
Solr cluster client.

Besides health and the readiness probe, Solr exposes long-running admin
actions (backup, restore, backup deletion and purge) through the
collections API's async mode. Submitting an action returns at once with
a caller-chosen token; progress is observed by polling REQUESTSTATUS with
that token, and the stored result is discarded with DELETESTATUS.

Tokens are derived from the collection name:

    {collection}-backup
    {collection}-restore
    {collection}-delete[-{snapshot}]
    {collection}-purge[-{snapshot}]

so at most one action of each kind can be in flight per collection.
Polling cadence and retry limits belong to the caller.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from probe_core.constants import (
    READINESS_COLLECTION,
    READINESS_COLLECTION_DOCUMENT_ID,
    SOLR_COLLECTIONS_ADMIN_PATH,
    SOLR_COMMIT_WITHIN_MS,
    SOLR_GET_PATH,
    SOLR_HEALTHY,
    SOLR_UPDATE_PATH,
    SolrAction,
    SolrParam,
)
from probe_core.errors import (
    ActionRejectedError,
    MarkerNotFoundError,
    ReadRejectedError,
    ResponseParseError,
    TransportError,
    WriteRejectedError,
)
from probe_core.transport import (
    HttpClientHandle,
    decode_json,
    parse_model,
    transport_errors,
)
from probe_protocols import (
    ActionKind,
    ActionState,
    ActionStatus,
    AsyncAction,
    HealthResult,
    HealthState,
)
from probe_solr.types import (
    ClusterStatusResponse,
    ListCollectionsResponse,
    RealtimeGetResponse,
    RequestStatusResponse,
    SolrResponse,
)

logger = logging.getLogger(__name__)

# Worst first.
HEALTH_SEVERITY = ("RED", "ORANGE", "YELLOW", SOLR_HEALTHY)


def action_token(collection: str, kind: ActionKind, snapshot: str = "") -> str:
    """Return the async token for an action on a collection."""
    token = f"{collection}-{kind.value}"
    if snapshot:
        token = f"{token}-{snapshot}"
    return token


def decode_backup_response(payload: Mapping[str, Any], collection: str) -> dict[str, Any]:
    """
    Flatten the name/value list of a backup status response.

    Solr returns named lists as flat arrays, ["name1", value1, "name2", value2, ...].

    Raises:
        ResponseParseError: If "response" is missing or not a well-formed
            name/value list.
    """
    operation = f"backup status of collection {collection}"
    entries = payload.get("response")
    if not isinstance(entries, list):
        raise ResponseParseError(operation, "didn't find response list", payload=payload)
    if len(entries) % 2 != 0:
        raise ResponseParseError(operation, "name/value list has odd length", payload=payload)

    decoded: dict[str, Any] = {}
    for name, value in zip(entries[0::2], entries[1::2]):
        if not isinstance(name, str):
            raise ResponseParseError(operation, f"entry name {name!r} is not a string", payload=payload)
        decoded[name] = value
    return decoded


def _error_detail(response: httpx.Response) -> str:
    # Error bodies are JSON from Solr itself, HTML from anything in front of it.
    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return str(payload["error"].get("msg", ""))
    return ""


def _worst_health(values: list[str]) -> str:
    for level in HEALTH_SEVERITY:
        if level in values:
            return level
    return values[0] if values else SOLR_HEALTHY


@dataclass(frozen=True)
class SolrClient(HttpClientHandle):
    """
    Solr client for the collections admin API, documents and async actions.

    Example:
        client = await SolrClientBuilder(db, store).build(pod="solr-0")
        action = await client.backup_collection("books", "nightly", "/backup", "s3")
        status = await client.poll_action(action.token)
        if status.state.finished:
            await client.flush_status(action.token)
    """

    # -------------------------------------------------------------------------
    # Collections admin API
    # -------------------------------------------------------------------------

    async def _admin(
        self,
        action: SolrAction,
        params: Mapping[str, str] | None = None,
        method: str = "GET",
    ) -> dict[str, Any]:
        query = {SolrParam.ACTION.value: action.value}
        query.update(params or {})

        with transport_errors(action.value):
            response = await self.http.request(method, SOLR_COLLECTIONS_ADMIN_PATH, params=query)

        if not response.is_success:
            raise ActionRejectedError(action.value, response.status_code, _error_detail(response))

        payload = decode_json(response, action.value)
        if not isinstance(payload, dict):
            raise ResponseParseError(action.value, "expected a JSON object", payload=payload)

        header = parse_model(SolrResponse, payload, action.value)
        if header.response_header.status != 0:
            detail = header.error.msg if header.error is not None else ""
            raise ActionRejectedError(action.value, header.response_header.status, detail)

        return payload

    async def cluster_state(self) -> ClusterStatusResponse:
        """Typed CLUSTERSTATUS."""
        payload = await self._admin(SolrAction.CLUSTER_STATUS)
        return parse_model(ClusterStatusResponse, payload, SolrAction.CLUSTER_STATUS.value)

    async def list_collections(self) -> list[str]:
        payload = await self._admin(SolrAction.LIST)
        return parse_model(ListCollectionsResponse, payload, SolrAction.LIST.value).collections

    async def list_indices(self) -> list[dict[str, Any]]:
        """Collections with their reported health, one dict per collection."""
        state = await self.cluster_state()
        return [
            {"name": name, "health": collection.health}
            for name, collection in state.cluster.collections.items()
        ]

    async def create_collection(
        self,
        name: str = READINESS_COLLECTION,
        shards: int = 1,
        replication_factor: int = 1,
    ) -> None:
        await self._admin(
            SolrAction.CREATE,
            {
                SolrParam.NAME.value: name,
                SolrParam.NUM_SHARDS.value: str(shards),
                SolrParam.REPLICATION_FACTOR.value: str(replication_factor),
            },
            method="POST",
        )
        logger.debug(f"Created collection {name}")

    async def health(self) -> HealthResult:
        """
        Evaluate cluster health from CLUSTERSTATUS.

        Every collection whose health is not GREEN becomes a reason. The
        overall token is the worst collection health.
        """
        try:
            state = await self.cluster_state()
        except TransportError as e:
            return HealthResult.unreachable(str(e))

        reasons = {
            name: collection.health
            for name, collection in state.cluster.collections.items()
            if collection.health != SOLR_HEALTHY
        }
        overall = _worst_health(list(reasons.values()))
        if reasons:
            return HealthResult(state=HealthState.DEGRADED, overall=overall, reasons=reasons)
        return HealthResult(state=HealthState.READY, overall=overall)

    # -------------------------------------------------------------------------
    # Readiness probe
    # -------------------------------------------------------------------------

    async def write_probe(self, document: Mapping[str, Any]) -> None:
        """
        Add the readiness marker to the marker collection.

        The document id is always the marker id; an existing marker is
        overwritten.

        Raises:
            TransportError: If the request could not be sent.
            WriteRejectedError: On a non-success status or a non-zero
                response status.
        """
        doc = dict(document)
        doc["id"] = READINESS_COLLECTION_DOCUMENT_ID
        body = {
            "add": {
                "doc": doc,
                "overwrite": True,
                "commitWithin": SOLR_COMMIT_WITHIN_MS,
            }
        }

        with transport_errors("write probe"):
            response = await self.http.post(
                SOLR_UPDATE_PATH.format(collection=READINESS_COLLECTION),
                json=body,
            )

        if not response.is_success:
            raise WriteRejectedError(response.status_code)

        payload = decode_json(response, "write probe")
        result = parse_model(SolrResponse, payload, "write probe")
        if result.response_header.status != 0:
            raise WriteRejectedError(response.status_code, response=payload)

    async def read_probe(self) -> dict[str, Any]:
        """
        Read the readiness marker with a real-time get.

        Returns:
            The stored document, including the fields Solr adds.

        Raises:
            TransportError: If the request could not be sent.
            MarkerNotFoundError: If the collection or the marker is missing.
            ReadRejectedError: On any other non-success status.
        """
        location = f"{READINESS_COLLECTION}/{READINESS_COLLECTION_DOCUMENT_ID}"

        with transport_errors("read probe"):
            response = await self.http.get(
                SOLR_GET_PATH.format(collection=READINESS_COLLECTION),
                params={"id": READINESS_COLLECTION_DOCUMENT_ID},
            )

        if response.status_code == httpx.codes.NOT_FOUND:
            raise MarkerNotFoundError(location)
        if not response.is_success:
            raise ReadRejectedError(response.status_code)

        result = parse_model(RealtimeGetResponse, decode_json(response, "read probe"), "read probe")
        if result.doc is None:
            raise MarkerNotFoundError(location)
        return result.doc

    # -------------------------------------------------------------------------
    # Async actions
    # -------------------------------------------------------------------------

    async def _submit(
        self,
        action: SolrAction,
        kind: ActionKind,
        collection: str,
        params: dict[str, str],
        method: str,
        snapshot: str = "",
    ) -> AsyncAction:
        token = action_token(collection, kind, snapshot)
        params[SolrParam.ASYNC.value] = token
        await self._admin(action, params, method=method)
        logger.debug(f"Submitted {kind.value} of collection {collection} as {token}")
        return AsyncAction(token=token, kind=kind, collection=collection)

    async def backup_collection(
        self,
        collection: str,
        backup_name: str,
        location: str,
        repository: str,
    ) -> AsyncAction:
        """
        Start an asynchronous backup of one collection.

        Raises:
            ActionRejectedError: If Solr refused the request.
        """
        return await self._submit(
            SolrAction.BACKUP,
            ActionKind.BACKUP,
            collection,
            {
                SolrParam.NAME.value: backup_name,
                SolrParam.COLLECTION.value: collection,
                SolrParam.LOCATION.value: location,
                SolrParam.REPOSITORY.value: repository,
            },
            method="POST",
        )

    async def restore_collection(
        self,
        collection: str,
        backup_name: str,
        location: str,
        repository: str,
        backup_id: int,
    ) -> AsyncAction:
        """Start an asynchronous restore of one backup point into a collection."""
        return await self._submit(
            SolrAction.RESTORE,
            ActionKind.RESTORE,
            collection,
            {
                SolrParam.NAME.value: backup_name,
                SolrParam.COLLECTION.value: collection,
                SolrParam.LOCATION.value: location,
                SolrParam.REPOSITORY.value: repository,
                SolrParam.BACKUP_ID.value: str(backup_id),
            },
            method="POST",
        )

    async def delete_backup(
        self,
        backup_name: str,
        collection: str,
        location: str,
        repository: str,
        backup_id: int,
        snapshot: str = "",
    ) -> AsyncAction:
        """Start asynchronous deletion of one backup point."""
        return await self._submit(
            SolrAction.DELETE_BACKUP,
            ActionKind.DELETE_BACKUP,
            collection,
            {
                SolrParam.NAME.value: backup_name,
                SolrParam.LOCATION.value: location,
                SolrParam.REPOSITORY.value: repository,
                SolrParam.BACKUP_ID.value: str(backup_id),
            },
            method="DELETE",
            snapshot=snapshot,
        )

    async def purge_backup(
        self,
        backup_name: str,
        collection: str,
        location: str,
        repository: str,
        snapshot: str = "",
    ) -> AsyncAction:
        """Start an asynchronous purge of unused files of a backup."""
        return await self._submit(
            SolrAction.DELETE_BACKUP,
            ActionKind.PURGE_BACKUP,
            collection,
            {
                SolrParam.NAME.value: backup_name,
                SolrParam.LOCATION.value: location,
                SolrParam.REPOSITORY.value: repository,
                SolrParam.PURGE_UNUSED.value: "true",
            },
            method="PUT",
            snapshot=snapshot,
        )

    async def request_status(self, token: str) -> ActionStatus:
        """
        Ask Solr for the state of an async action.

        Raises:
            ResponseParseError: If the reported state is not a known one.
        """
        payload = await self._admin(
            SolrAction.REQUEST_STATUS,
            {SolrParam.REQUEST_ID.value: token},
        )
        result = parse_model(RequestStatusResponse, payload, SolrAction.REQUEST_STATUS.value)
        try:
            state = ActionState(result.status.state)
        except ValueError:
            raise ResponseParseError(
                SolrAction.REQUEST_STATUS.value,
                f"unknown state {result.status.state!r}",
                payload=payload,
            ) from None
        return ActionStatus(token=token, state=state, message=result.status.msg)

    async def poll_action(self, token: str) -> ActionStatus:
        """
        Poll an async action once.

        A completed action only counts as completed if every collection is
        healthy afterwards. Otherwise the result is FAILED with the
        unhealthy collections attached.
        """
        status = await self.request_status(token)
        if status.state != ActionState.COMPLETED:
            return status

        state = await self.cluster_state()
        unhealthy = {
            name: collection.health
            for name, collection in state.cluster.collections.items()
            if collection.health != SOLR_HEALTHY
        }
        if not unhealthy:
            return status

        logger.error(f"Action {token} completed but collections are not healthy: {unhealthy}")
        return ActionStatus(
            token=token,
            state=ActionState.FAILED,
            message=f"health for collections {', '.join(sorted(unhealthy))} is not green",
            unhealthy_collections=unhealthy,
        )

    async def flush_status(self, token: str) -> None:
        """
        Discard the stored result of an async action.

        Flushing an unknown or already flushed token succeeds; polling it
        afterwards reports NOT_FOUND.
        """
        await self._admin(SolrAction.DELETE_STATUS, {SolrParam.REQUEST_ID.value: token})
        logger.debug(f"Flushed status of {token}")
