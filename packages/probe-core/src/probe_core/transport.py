"""
HTTP transport construction and error mapping.

All HTTP-speaking clients share one transport recipe: fixed connect,
request and idle-connection timeouts, optional basic auth, and either a
mutual-TLS SSLContext or an unverified connection. Transport failures are
re-raised as TransportError carrying the operation name, and response
payloads are validated into pydantic models with parse failures mapped to
ResponseParseError.
"""

import json
import ssl
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from probe_core.errors import ResponseParseError, TransportError
from probe_core.settings import ProbeSettings, settings as default_settings
from probe_core.version import Variant
from probe_protocols import Credential

ModelT = TypeVar("ModelT", bound=BaseModel)


def create_http_client(
    base_url: str,
    *,
    credential: Credential | None = None,
    ssl_context: ssl.SSLContext | None = None,
    verify: bool = True,
    headers: dict[str, str] | None = None,
    settings: ProbeSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient bound to a store address.

    Args:
        base_url: Store address, e.g. "https://es-0.es-pods.demo.svc:9200".
        credential: Basic-auth credential; None sends no auth header.
        ssl_context: Mutual-TLS context; takes precedence over verify.
        verify: Whether to verify the server certificate when no context
            is given.
        headers: Default headers for every request.
        settings: Timeout settings; the module defaults when None.
        transport: Optional transport override (used by tests).

    Returns:
        A configured, unopened AsyncClient. The caller owns it.
    """
    cfg = settings or default_settings
    auth = None
    if credential is not None:
        auth = httpx.BasicAuth(credential.username, credential.password)

    return httpx.AsyncClient(
        base_url=base_url,
        auth=auth,
        verify=ssl_context if ssl_context is not None else verify,
        headers=headers,
        timeout=httpx.Timeout(cfg.request_timeout, connect=cfg.connect_timeout),
        limits=httpx.Limits(keepalive_expiry=cfg.idle_timeout),
        transport=transport,
    )


@contextmanager
def transport_errors(operation: str) -> Iterator[None]:
    """
    Re-raise httpx request failures as TransportError.

    Covers connection and timeout failures as well as bodies that cannot
    be decoded (httpx.DecodingError). HTTP status errors are not caught
    here; status handling is each operation's own business.

    Example:
        with transport_errors("cluster health"):
            response = await self.http.get("/_cluster/health")
    """
    try:
        yield
    except httpx.RequestError as e:
        raise TransportError(operation, str(e) or type(e).__name__) from e


def decode_json(response: httpx.Response, operation: str) -> Any:
    """Decode a JSON body, mapping decode failures to ResponseParseError."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ResponseParseError(operation, f"body is not JSON: {e}") from e


def parse_model(model: type[ModelT], payload: Any, operation: str) -> ModelT:
    """Validate a decoded payload, mapping validation failures to ResponseParseError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ResponseParseError(operation, str(e), payload=payload) from e


@dataclass(frozen=True)
class HttpClientHandle:
    """
    Base of every HTTP client variant.

    Immutable once built. Handles are async context managers; leaving the
    context closes the transport.

    Attributes:
        http: Bound httpx.AsyncClient with base_url set to the store.
        address: The resolved store address.
        credential: Credential in use, or None when security is disabled.
        variant: Protocol variant the handle speaks.
    """

    http: httpx.AsyncClient
    address: str = ""
    credential: Credential | None = None
    variant: Variant = Variant.V1

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
