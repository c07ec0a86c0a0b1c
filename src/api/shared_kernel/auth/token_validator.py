"""Validation of access tokens minted by the token issuer.

Validation never raises for a bad token. It returns either the extracted
``TokenClaims`` or an ``InvalidToken`` whose reason is meant for logs
only; network callers must treat every invalid outcome identically.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from jose import JWTError, jwt

from shared_kernel.auth.observability import (
    DefaultTokenValidatorProbe,
    TokenValidatorProbe,
)
from shared_kernel.auth.signing_keys import SigningKeyProvider
from shared_kernel.auth.token_issuer import DEFAULT_TENANT_CLAIM, ROLE_CLAIM


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TokenClaims:
    """Claims of a validated access token."""

    user_id: str
    tenant_id: str
    token_id: str
    expires_at: datetime
    email: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    roles: tuple[str, ...] = ()
    raw: dict[str, Any] | None = None

    def as_mapping(self) -> dict[str, Any]:
        """Claims as a plain mapping, keyed by claim name."""
        return dict(self.raw or {})


@dataclass(frozen=True)
class InvalidToken:
    """Outcome of a failed validation."""

    reason: str


TokenValidationResult = TokenClaims | InvalidToken


class TokenValidator:
    """Verifies access tokens against the process signing key.

    Only the provider's own algorithm is accepted, so a token signed in
    the other mode (e.g. HS256 while the process runs on a certificate)
    is rejected. Expiry is checked with no clock-skew allowance.
    """

    def __init__(
        self,
        key_provider: SigningKeyProvider,
        issuer: str,
        audience: str,
        tenant_claim: str = DEFAULT_TENANT_CLAIM,
        clock: Callable[[], datetime] = _utc_now,
        probe: TokenValidatorProbe | None = None,
    ) -> None:
        self._key_provider = key_provider
        self._issuer = issuer
        self._audience = audience
        self._tenant_claim = tenant_claim
        self._clock = clock
        self._probe = probe or DefaultTokenValidatorProbe()

    def validate(self, token: str) -> TokenValidationResult:
        """Validate a token and extract its claims.

        Args:
            token: Compact JWS string.

        Returns:
            TokenClaims on success, InvalidToken otherwise.
        """
        if not token or not token.strip():
            return self._invalid("Empty token")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            return self._invalid(f"Malformed token: {e}")
        if not header:
            return self._invalid("Missing token header")

        try:
            claims = jwt.decode(
                token,
                self._key_provider.validation_key(),
                algorithms=[self._key_provider.algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={
                    "verify_signature": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    # Expiry is checked below against the injected clock.
                    "verify_exp": False,
                    "require_aud": True,
                    "require_iss": True,
                    "require_sub": True,
                    "require_jti": True,
                },
            )
        except JWTError as e:
            return self._invalid(f"Verification failed: {e}")

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            return self._invalid("Malformed exp claim")
        if exp <= self._clock().timestamp():
            return self._invalid("Token expired")

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            return self._invalid("Missing sub claim")

        token_id = claims.get("jti")
        try:
            uuid.UUID(str(token_id))
        except ValueError:
            return self._invalid("Malformed jti claim")

        tenant_id = claims.get(self._tenant_claim)
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            return self._invalid(f"Missing {self._tenant_claim} claim")

        roles = claims.get(ROLE_CLAIM, [])
        if isinstance(roles, str):
            roles = [roles]

        self._probe.token_validated(user_id=subject, tenant_id=tenant_id)
        return TokenClaims(
            user_id=subject,
            tenant_id=tenant_id,
            token_id=str(token_id),
            expires_at=datetime.fromtimestamp(exp, tz=UTC),
            email=claims.get("email"),
            username=claims.get("name"),
            first_name=claims.get("first_name"),
            last_name=claims.get("last_name"),
            roles=tuple(str(role) for role in roles),
            raw=claims,
        )

    def _invalid(self, reason: str) -> InvalidToken:
        self._probe.token_validation_failed(reason=reason)
        return InvalidToken(reason=reason)
