"""Signing key material for issued tokens.

Exactly one of two modes is active for the lifetime of a process:

- symmetric: a shared secret signs and validates (HS256)
- certificate: an RSA key pair loaded from a PKCS#12 bundle; the private
  key signs and the public key validates (RS256)

Construction fails fast with ``SigningKeyMisconfiguredError`` so that the
application never starts serving with half-configured key material.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12

from shared_kernel.auth.observability import DefaultSigningKeyProbe, SigningKeyProbe

if TYPE_CHECKING:
    from infrastructure.settings import JWTSettings

MIN_SECRET_LENGTH = 32


class SigningKeyMisconfiguredError(Exception):
    """Raised when signing key material is absent, unreadable or unusable."""

    pass


class SigningMode(StrEnum):
    """Signing strategy selected by configuration."""

    SYMMETRIC = "symmetric"
    CERTIFICATE = "certificate"


@dataclass(frozen=True)
class SigningCredential:
    """Key and algorithm used to sign tokens.

    Attributes:
        key: Shared secret (symmetric) or PEM-encoded private key (certificate).
        algorithm: JWS algorithm name.
        key_id: Certificate thumbprint emitted as the ``kid`` header, if any.
    """

    key: str
    algorithm: str
    key_id: str | None = None


class SigningKeyProvider:
    """Holds the signing credential and matching validation key.

    Use the ``symmetric``, ``from_certificate`` or ``from_settings``
    constructors; instances are immutable once built and safe to share
    between concurrent requests.
    """

    def __init__(
        self,
        mode: SigningMode,
        credential: SigningCredential,
        validation_key: str,
    ) -> None:
        self._mode = mode
        self._credential = credential
        self._validation_key = validation_key

    @property
    def mode(self) -> SigningMode:
        return self._mode

    @property
    def algorithm(self) -> str:
        return self._credential.algorithm

    def signing_credential(self) -> SigningCredential:
        """Get the credential used to sign tokens."""
        return self._credential

    def validation_key(self) -> str:
        """Get the key used to verify token signatures."""
        return self._validation_key

    @classmethod
    def symmetric(
        cls,
        secret: str | None,
        probe: SigningKeyProbe | None = None,
    ) -> SigningKeyProvider:
        """Build a provider that signs with a shared HMAC secret.

        Args:
            secret: The shared secret; at least 32 characters.
            probe: Optional domain probe for observability.

        Raises:
            SigningKeyMisconfiguredError: If the secret is absent or too short.
        """
        probe = probe or DefaultSigningKeyProbe()
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            reason = (
                f"Secret key must be at least {MIN_SECRET_LENGTH} characters long"
            )
            probe.signing_keys_misconfigured(
                mode=SigningMode.SYMMETRIC.value, reason=reason
            )
            raise SigningKeyMisconfiguredError(reason)

        credential = SigningCredential(key=secret, algorithm="HS256")
        probe.signing_keys_loaded(
            mode=SigningMode.SYMMETRIC.value,
            algorithm=credential.algorithm,
            key_id=None,
        )
        return cls(SigningMode.SYMMETRIC, credential, validation_key=secret)

    @classmethod
    def from_certificate(
        cls,
        path: str | Path | None,
        password: str | None,
        probe: SigningKeyProbe | None = None,
    ) -> SigningKeyProvider:
        """Build a provider from a PKCS#12 certificate bundle.

        Args:
            path: Location of the .pfx/.p12 bundle.
            password: Passphrase protecting the bundle, if any.
            probe: Optional domain probe for observability.

        Raises:
            SigningKeyMisconfiguredError: If the path is empty, the file is
                missing or unreadable, the passphrase is wrong, or the
                bundle carries no RSA private key.
        """
        probe = probe or DefaultSigningKeyProbe()

        def fail(reason: str, cause: Exception | None = None) -> NoReturn:
            probe.signing_keys_misconfigured(
                mode=SigningMode.CERTIFICATE.value, reason=reason
            )
            raise SigningKeyMisconfiguredError(reason) from cause

        if path is None or not str(path).strip():
            fail("Certificate path is not configured")

        bundle_path = Path(str(path))
        if not bundle_path.is_file():
            fail(f"Certificate file not found: {bundle_path}")

        try:
            data = bundle_path.read_bytes()
        except OSError as e:
            fail(f"Certificate file could not be read: {bundle_path}", e)

        try:
            private_key, certificate, _ = pkcs12.load_key_and_certificates(
                data, password.encode("utf-8") if password else None
            )
        except ValueError as e:
            fail(
                "Failed to load certificate. Ensure the certificate is valid "
                "and the password is correct",
                e,
            )

        if private_key is None:
            fail("Certificate bundle does not contain a private key")
        if not isinstance(private_key, rsa.RSAPrivateKey):
            fail("Certificate private key is not an RSA key")

        signing_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii")
        validation_pem = (
            private_key.public_key()
            .public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            .decode("ascii")
        )
        key_id = (
            certificate.fingerprint(hashes.SHA1()).hex().upper()
            if certificate is not None
            else None
        )

        credential = SigningCredential(
            key=signing_pem, algorithm="RS256", key_id=key_id
        )
        probe.signing_keys_loaded(
            mode=SigningMode.CERTIFICATE.value,
            algorithm=credential.algorithm,
            key_id=key_id,
        )
        return cls(SigningMode.CERTIFICATE, credential, validation_key=validation_pem)

    @classmethod
    def from_settings(
        cls,
        settings: JWTSettings,
        probe: SigningKeyProbe | None = None,
    ) -> SigningKeyProvider:
        """Build the provider selected by ``settings.use_rsa_certificate``."""
        if settings.use_rsa_certificate:
            password = settings.rsa_certificate_password
            return cls.from_certificate(
                settings.rsa_private_key_path,
                password.get_secret_value() if password is not None else None,
                probe=probe,
            )
        return cls.symmetric(settings.secret_key.get_secret_value(), probe=probe)
