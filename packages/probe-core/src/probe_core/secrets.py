"""
Secret store interface.

Secret storage itself belongs to the caller; builders only need a key-value
lookup by reference. SecretStore is that lookup. InMemorySecretStore backs it
with a plain dict, for callers that already hold secret data and for tests.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from probe_core.errors import SecretNotFoundError
from probe_protocols import SecretRef

SecretData = Mapping[str, bytes | str]


@runtime_checkable
class SecretStore(Protocol):
    """
    Protocol for secret lookups.

    Implementations must raise SecretNotFoundError when the referenced
    secret does not exist, and may raise any other exception for transport
    failures; builders treat both as an unresolvable secret.
    """

    async def get(self, ref: SecretRef) -> SecretData:
        ...


class InMemorySecretStore:
    """
    Dict-backed SecretStore.

    Example:
        store = InMemorySecretStore({
            SecretRef("demo", "es-auth"): {"username": b"elastic", "password": b"pw"},
        })
        data = await store.get(SecretRef("demo", "es-auth"))
    """

    def __init__(self, secrets: Mapping[SecretRef, SecretData] | None = None) -> None:
        self._secrets: dict[SecretRef, SecretData] = dict(secrets or {})

    def put(self, ref: SecretRef, data: SecretData) -> None:
        """Add or replace a secret."""
        self._secrets[ref] = data

    async def get(self, ref: SecretRef) -> SecretData:
        try:
            return self._secrets[ref]
        except KeyError:
            raise SecretNotFoundError(str(ref)) from None


def decode_field(value: bytes | str) -> str:
    """Secret values arrive as bytes from most stores; accept str as well."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value
