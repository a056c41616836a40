"""
Credential resolution from auth secrets.

Presence is checked eagerly: a secret without a username or password field
is an error at build time, never an empty string handed to the transport.
"""

import logging

from probe_core.constants import SecretKey
from probe_core.errors import CredentialMissingError
from probe_core.secrets import SecretData, SecretStore, decode_field
from probe_protocols import Credential, SecretRef

logger = logging.getLogger(__name__)


def credential_from_secret(data: SecretData, secret_name: str) -> Credential:
    """
    Extract a Credential from already-fetched secret data.

    Args:
        data: Secret key-value data.
        secret_name: Name used in error messages ("namespace/name").

    Returns:
        Credential with decoded username and password.

    Raises:
        CredentialMissingError: If either field is absent or is not valid
            UTF-8. Empty values count as present.
    """
    fields: dict[SecretKey, str] = {}
    for key in (SecretKey.USERNAME, SecretKey.PASSWORD):
        if key.value not in data:
            logger.error(f"Failed for secret: {secret_name}, {key.value} is missing")
            raise CredentialMissingError(secret_name, field=key.value)
        try:
            fields[key] = decode_field(data[key.value])
        except UnicodeDecodeError as e:
            logger.error(f"Failed for secret: {secret_name}, {key.value} is not valid UTF-8")
            raise CredentialMissingError(
                secret_name,
                field=key.value,
                detail=f"{key.value} in secret {secret_name} is not valid UTF-8",
            ) from e

    return Credential(
        username=fields[SecretKey.USERNAME],
        password=fields[SecretKey.PASSWORD],
    )


async def resolve_credential(
    store: SecretStore,
    ref: SecretRef | None,
    *,
    security_enabled: bool = True,
) -> Credential | None:
    """
    Resolve the credential a client should authenticate with.

    Args:
        store: Secret store to read from.
        ref: Reference to the auth secret.
        security_enabled: When False, resolution is skipped entirely.

    Returns:
        The resolved Credential, or None when security is disabled.

    Raises:
        CredentialMissingError: If security is enabled and the reference is
            missing, the secret cannot be fetched, or a field is absent.
    """
    if not security_enabled:
        return None
    if ref is None:
        raise CredentialMissingError(None)

    try:
        data = await store.get(ref)
    except Exception as e:
        logger.error(f"Failed to get secret: {ref} with: {e}")
        raise CredentialMissingError(str(ref)) from e

    return credential_from_secret(data, str(ref))
