"""Authentication shared kernel module."""

from shared_kernel.auth.observability import (
    DefaultSigningKeyProbe,
    DefaultTokenIssuerProbe,
    DefaultTokenValidatorProbe,
    SigningKeyProbe,
    TokenIssuerProbe,
    TokenValidatorProbe,
)
from shared_kernel.auth.security_context import SecurityContext, build_security_context
from shared_kernel.auth.signing_keys import (
    SigningCredential,
    SigningKeyMisconfiguredError,
    SigningKeyProvider,
    SigningMode,
)
from shared_kernel.auth.token_issuer import (
    IssuedRefreshToken,
    IssuedToken,
    TokenIssuer,
    TokenSubject,
    hash_refresh_token,
)
from shared_kernel.auth.token_validator import (
    InvalidToken,
    TokenClaims,
    TokenValidationResult,
    TokenValidator,
)

__all__ = [
    "DefaultSigningKeyProbe",
    "DefaultTokenIssuerProbe",
    "DefaultTokenValidatorProbe",
    "InvalidToken",
    "IssuedRefreshToken",
    "IssuedToken",
    "SecurityContext",
    "SigningCredential",
    "SigningKeyMisconfiguredError",
    "SigningKeyProbe",
    "SigningKeyProvider",
    "SigningMode",
    "TokenClaims",
    "TokenIssuer",
    "TokenIssuerProbe",
    "TokenSubject",
    "TokenValidationResult",
    "TokenValidator",
    "TokenValidatorProbe",
    "build_security_context",
    "hash_refresh_token",
]
