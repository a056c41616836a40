"""
Shared fixtures.

Certificates are generated once per test session with cryptography: one
CA and one client certificate it issued, plus an unrelated key for
mismatch cases.
"""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _key_pem(key) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


def _issue(subject: str, key, issuer: str, issuer_key, ca: bool) -> x509.Certificate:
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject))
        .issuer_name(_name(issuer))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def pki() -> dict[str, bytes]:
    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = _issue("probe-test-ca", ca_key, "probe-test-ca", ca_key, ca=True)
    client_key = ec.generate_private_key(ec.SECP256R1())
    client_cert = _issue("probe-client", client_key, "probe-test-ca", ca_key, ca=False)
    other_key = ec.generate_private_key(ec.SECP256R1())
    return {
        "tls.crt": client_cert.public_bytes(serialization.Encoding.PEM),
        "tls.key": _key_pem(client_key),
        "ca.crt": ca_cert.public_bytes(serialization.Encoding.PEM),
        "other.key": _key_pem(other_key),
    }


@pytest.fixture
def tls_secret_data(pki) -> dict[str, bytes]:
    """A valid tls.crt/tls.key/ca.crt secret, fresh per test."""
    return {k: pki[k] for k in ("tls.crt", "tls.key", "ca.crt")}
