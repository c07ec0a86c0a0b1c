"""Process-wide security context.

Bundles the signing key provider with the issuer and validator built on
it. The context is assembled once at application startup and handed to
request handlers through ``app.state``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from shared_kernel.auth.observability import SigningKeyProbe
from shared_kernel.auth.signing_keys import SigningKeyProvider
from shared_kernel.auth.token_issuer import TokenIssuer
from shared_kernel.auth.token_validator import TokenValidator

if TYPE_CHECKING:
    from infrastructure.settings import JWTSettings, TenantResolutionSettings


@dataclass(frozen=True)
class SecurityContext:
    """Immutable bundle of token components sharing one key provider."""

    key_provider: SigningKeyProvider
    token_issuer: TokenIssuer
    token_validator: TokenValidator


def build_security_context(
    jwt_settings: JWTSettings,
    tenancy_settings: TenantResolutionSettings,
    probe: SigningKeyProbe | None = None,
) -> SecurityContext:
    """Load signing keys and wire the issuer and validator to them.

    Raises:
        SigningKeyMisconfiguredError: If the configured key material is
            unusable. The application must not start in that case.
    """
    key_provider = SigningKeyProvider.from_settings(jwt_settings, probe=probe)
    issuer = TokenIssuer(
        key_provider,
        issuer=jwt_settings.issuer,
        audience=jwt_settings.audience,
        access_token_lifetime=timedelta(
            minutes=jwt_settings.access_token_expiration_minutes
        ),
        refresh_token_lifetime=timedelta(
            days=jwt_settings.refresh_token_expiration_days
        ),
        tenant_claim=tenancy_settings.claim_name,
    )
    validator = TokenValidator(
        key_provider,
        issuer=jwt_settings.issuer,
        audience=jwt_settings.audience,
        tenant_claim=tenancy_settings.claim_name,
    )
    return SecurityContext(
        key_provider=key_provider,
        token_issuer=issuer,
        token_validator=validator,
    )
