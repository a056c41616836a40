"""Tests for the HTTP transport factory, error mapping and settings."""

import base64

import httpx
import pytest
from pydantic import BaseModel

from probe_core.errors import ResponseParseError, TransportError
from probe_core.settings import ProbeSettings
from probe_core.transport import (
    HttpClientHandle,
    create_http_client,
    decode_json,
    parse_model,
    transport_errors,
)
from probe_protocols import Credential


class Status(BaseModel):
    status: str


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_timeouts_from_settings(self):
        settings = ProbeSettings(connect_timeout=5.0, request_timeout=12.0, idle_timeout=1.0)
        async with create_http_client("http://es:9200", settings=settings) as http:
            assert http.timeout.connect == 5.0
            assert http.timeout.read == 12.0
            assert http.base_url == httpx.URL("http://es:9200")

    @pytest.mark.asyncio
    async def test_basic_auth_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={})

        http = create_http_client(
            "http://es:9200",
            credential=Credential("elastic", "pw"),
            transport=httpx.MockTransport(handler),
        )
        async with http:
            await http.get("/")

        assert seen["auth"] == "Basic " + base64.b64encode(b"elastic:pw").decode()

    @pytest.mark.asyncio
    async def test_no_credential_no_auth_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={})

        async with create_http_client("http://es:9200", transport=httpx.MockTransport(handler)) as http:
            await http.get("/")

        assert seen["auth"] is None


class TestTransportErrors:
    def test_maps_httpx_transport_error(self):
        with pytest.raises(TransportError) as exc_info:
            with transport_errors("cluster health"):
                raise httpx.ConnectError("connection refused")
        assert exc_info.value.operation == "cluster health"
        assert "connection refused" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_maps_undecodable_body(self):
        """A body that fails content decoding is a request failure, not a raw httpx error."""

        def handler(request):
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

        async with create_http_client("http://es:9200", transport=httpx.MockTransport(handler)) as http:
            with pytest.raises(TransportError) as exc_info:
                with transport_errors("cluster health"):
                    await http.get("/_cluster/health")
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    def test_other_errors_pass_through(self):
        with pytest.raises(KeyError):
            with transport_errors("cluster health"):
                raise KeyError("x")


class TestParsing:
    def test_decode_json(self):
        assert decode_json(httpx.Response(200, json={"a": 1}), "op") == {"a": 1}

    def test_decode_non_json(self):
        with pytest.raises(ResponseParseError) as exc_info:
            decode_json(httpx.Response(200, text="<html>"), "dashboard status")
        assert exc_info.value.operation == "dashboard status"

    def test_parse_model(self):
        assert parse_model(Status, {"status": "green"}, "op").status == "green"

    def test_parse_model_missing_field(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_model(Status, {"other": 1}, "cluster status")
        assert exc_info.value.payload == {"other": 1}


class TestHttpClientHandle:
    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with HttpClientHandle(http=http, address="http://es:9200"):
            assert not http.is_closed
        assert http.is_closed


class TestProbeSettings:
    def test_defaults(self):
        settings = ProbeSettings()
        assert settings.connect_timeout == 30.0
        assert settings.idle_timeout == 3.0
        assert settings.request_timeout == 30.0
        assert settings.sql_connect_timeout == 10
        assert settings.cluster_domain_suffix == "svc"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PROBE_CONNECT_TIMEOUT", "7.5")
        monkeypatch.setenv("PROBE_CLUSTER_DOMAIN_SUFFIX", "svc.cluster.local")
        settings = ProbeSettings()
        assert settings.connect_timeout == 7.5
        assert settings.cluster_domain_suffix == "svc.cluster.local"
