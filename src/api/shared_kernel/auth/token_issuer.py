"""Issuance of signed access tokens and opaque refresh tokens."""

from __future__ import annotations

import base64
import hashlib
import secrets
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt

from shared_kernel.auth.observability import (
    DefaultTokenIssuerProbe,
    TokenIssuerProbe,
)
from shared_kernel.auth.signing_keys import SigningKeyProvider

REFRESH_TOKEN_BYTES = 64
ROLE_CLAIM = "role"
DEFAULT_TENANT_CLAIM = "tenant_id"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def hash_refresh_token(token: str) -> str:
    """Digest a refresh token for storage and lookup.

    Refresh tokens are bearer secrets; only their SHA-256 digest is
    persisted.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TokenSubject:
    """Identity attributes embedded in an access token."""

    user_id: str
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class IssuedToken:
    """A signed access token and its metadata."""

    token: str
    token_id: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedRefreshToken:
    """An opaque refresh token and its expiry."""

    token: str
    expires_at: datetime


class TokenIssuer:
    """Mints access and refresh tokens.

    Access tokens are compact JWS strings signed with the provider's
    credential. Refresh tokens are random, unstructured strings that only
    mean something when looked up server-side.
    """

    def __init__(
        self,
        key_provider: SigningKeyProvider,
        issuer: str,
        audience: str,
        access_token_lifetime: timedelta = timedelta(minutes=60),
        refresh_token_lifetime: timedelta = timedelta(days=7),
        tenant_claim: str = DEFAULT_TENANT_CLAIM,
        clock: Callable[[], datetime] = _utc_now,
        probe: TokenIssuerProbe | None = None,
    ) -> None:
        self._key_provider = key_provider
        self._issuer = issuer
        self._audience = audience
        self._access_token_lifetime = access_token_lifetime
        self._refresh_token_lifetime = refresh_token_lifetime
        self._tenant_claim = tenant_claim
        self._clock = clock
        self._probe = probe or DefaultTokenIssuerProbe()

    def issue_access_token(
        self,
        subject: TokenSubject,
        roles: Iterable[str],
        tenant_id: str,
    ) -> IssuedToken:
        """Sign an access token for a principal of the given tenant.

        Args:
            subject: Identity of the principal.
            roles: Role names granted to the principal.
            tenant_id: Internal id of the principal's tenant.

        Returns:
            The signed token, its ``jti`` and its expiry.
        """
        # JWT timestamps have whole-second precision
        now = self._clock().replace(microsecond=0)
        expires_at = now + self._access_token_lifetime
        token_id = str(uuid.uuid4())
        role_names = list(dict.fromkeys(roles))

        claims: dict[str, Any] = {
            "sub": subject.user_id,
            "email": subject.email,
            "jti": token_id,
            "name": subject.username,
            self._tenant_claim: tenant_id,
            ROLE_CLAIM: role_names,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if subject.first_name:
            claims["first_name"] = subject.first_name
        if subject.last_name:
            claims["last_name"] = subject.last_name

        credential = self._key_provider.signing_credential()
        headers = {"kid": credential.key_id} if credential.key_id else None
        token = jwt.encode(
            claims,
            credential.key,
            algorithm=credential.algorithm,
            headers=headers,
        )

        self._probe.access_token_issued(
            user_id=subject.user_id,
            tenant_id=tenant_id,
            token_id=token_id,
            role_count=len(role_names),
        )
        return IssuedToken(token=token, token_id=token_id, expires_at=expires_at)

    def issue_refresh_token(self) -> IssuedRefreshToken:
        """Generate a new opaque refresh token."""
        token = base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode(
            "ascii"
        )
        self._probe.refresh_token_issued()
        return IssuedRefreshToken(
            token=token,
            expires_at=self._clock() + self._refresh_token_lifetime,
        )
