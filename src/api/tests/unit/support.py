"""Shared helpers for unit tests."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

TEST_SECRET = "unit-test-secret-key-that-is-long-enough"
TEST_ISSUER = "tenant-gateway-tests"
TEST_AUDIENCE = "tenant-gateway-test-clients"


class FrozenClock:
    """Clock returning a settable instant, for expiry and lockout tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def write_bundle(path: Path, private_key, password: str | None) -> x509.Certificate:
    """Write a self-signed PKCS#12 bundle for ``private_key`` to ``path``."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "tenant-gateway-test")])
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )
    encryption = (
        serialization.BestAvailableEncryption(password.encode("utf-8"))
        if password
        else serialization.NoEncryption()
    )
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"gateway", private_key, certificate, None, encryption
        )
    )
    return certificate
