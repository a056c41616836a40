"""
TLS material for mutual-TLS clients.

A certificate secret carries a client certificate, its private key and the
CA bundle. The same CA material is used as the client's trust roots: the
authority that issued the server certificate is trusted directly, there is
no separate issuer chain lookup.

Material is validated with the cryptography library when it is loaded, so a
broken secret fails the build instead of the first handshake.
"""

import logging
import os
import ssl
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import NamedTuple

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from probe_core.constants import SecretKey
from probe_core.errors import CertificateInvalidError
from probe_core.secrets import SecretData, SecretStore
from probe_protocols import SecretRef

logger = logging.getLogger(__name__)


class TLSFiles(NamedTuple):
    """Filesystem paths of materialized TLS material."""

    cert: str
    key: str
    ca: str


def _field_bytes(data: SecretData, key: SecretKey) -> bytes:
    value = data.get(key.value)
    if value is None or len(value) == 0:
        raise CertificateInvalidError(f"{key.value} is missing")
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def _public_key_der(key) -> bytes:
    return key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@dataclass(frozen=True)
class TLSMaterial:
    """
    Client certificate, private key and trust roots, as PEM bytes.

    Attributes:
        cert_pem: Client certificate (optionally followed by its chain).
        key_pem: Unencrypted private key matching cert_pem.
        ca_pem: CA bundle used both as trust roots and as the client CA.
    """

    cert_pem: bytes
    key_pem: bytes = field(repr=False)
    ca_pem: bytes

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_secret(cls, data: SecretData) -> "TLSMaterial":
        """
        Build TLSMaterial from certificate secret data.

        Raises:
            CertificateInvalidError: If a field is missing or unparsable,
                the key does not match the certificate, or the CA field
                holds no certificate.
        """
        return cls(
            cert_pem=_field_bytes(data, SecretKey.TLS_CERT),
            key_pem=_field_bytes(data, SecretKey.TLS_KEY),
            ca_pem=_field_bytes(data, SecretKey.CA_CERT),
        )

    def validate(self) -> None:
        """Parse every PEM block and check the key pair."""
        try:
            cert = x509.load_pem_x509_certificate(self.cert_pem)
        except ValueError as e:
            raise CertificateInvalidError(f"failed to parse certificate: {e}") from e

        try:
            key = serialization.load_pem_private_key(self.key_pem, password=None)
        except (ValueError, TypeError) as e:
            raise CertificateInvalidError(f"failed to parse private key: {e}") from e

        if _public_key_der(cert.public_key()) != _public_key_der(key.public_key()):
            raise CertificateInvalidError("private key does not match certificate")

        try:
            cas = x509.load_pem_x509_certificates(self.ca_pem)
        except ValueError as e:
            raise CertificateInvalidError(f"no CA certificate found: {e}") from e
        if not cas:
            raise CertificateInvalidError("no CA certificate found")

    @contextmanager
    def materialize(self) -> Iterator[TLSFiles]:
        """
        Write the material to a private temporary directory.

        For drivers that only accept file paths. The directory and its
        contents are removed when the context exits, on every exit path.

        Example:
            with material.materialize() as files:
                await connect(sslcert=files.cert, sslkey=files.key, sslrootcert=files.ca)
        """
        with tempfile.TemporaryDirectory(prefix="probe-tls-") as tmp:
            files = TLSFiles(
                cert=os.path.join(tmp, SecretKey.TLS_CERT.value),
                key=os.path.join(tmp, SecretKey.TLS_KEY.value),
                ca=os.path.join(tmp, SecretKey.CA_CERT.value),
            )
            for path, content in zip(files, (self.cert_pem, self.key_pem, self.ca_pem)):
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
            yield files

    def ssl_context(self) -> ssl.SSLContext:
        """
        Build a client SSLContext presenting the certificate and trusting the CA.

        Returns:
            SSLContext with server verification against ca_pem, the client
            certificate loaded, and TLS 1.3 as maximum version.
        """
        try:
            context = ssl.create_default_context(
                ssl.Purpose.SERVER_AUTH,
                cadata=self.ca_pem.decode("utf-8"),
            )
            context.maximum_version = ssl.TLSVersion.TLSv1_3
            with self.materialize() as files:
                context.load_cert_chain(certfile=files.cert, keyfile=files.key)
        except (ssl.SSLError, ValueError) as e:
            raise CertificateInvalidError(f"failed to create certificate for TLS config: {e}") from e
        return context


async def load_tls_material(store: SecretStore, ref: SecretRef) -> TLSMaterial:
    """
    Fetch and validate TLS material from a certificate secret.

    Raises:
        CertificateInvalidError: If the secret cannot be fetched or its
            content is invalid.
    """
    try:
        data = await store.get(ref)
    except Exception as e:
        logger.error(f"Failed to get certificate secret {ref}: {e}")
        raise CertificateInvalidError(f"failed to get certificate secret {ref}") from e

    return TLSMaterial.from_secret(data)
