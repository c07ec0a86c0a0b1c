"""Bearer token authentication dependencies.

The security context (signing keys, issuer, validator) is built once at
startup and kept on ``app.state``; these dependencies read it from the
request rather than from module-level state.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from iam.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from shared_kernel.auth import InvalidToken, SecurityContext, TokenClaims

# auto_error=False so that anonymous endpoints can share the scheme
bearer_scheme = HTTPBearer(auto_error=False)


def get_security_context(request: Request) -> SecurityContext:
    """Get the security context assembled at startup."""
    return request.app.state.security


def get_authentication_probe() -> AuthenticationProbe:
    """Get AuthenticationProbe instance.

    Returns:
        DefaultAuthenticationProbe instance for observability
    """
    return DefaultAuthenticationProbe()


def get_token_claims(
    security: Annotated[SecurityContext, Depends(get_security_context)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> TokenClaims | None:
    """Validate the bearer token, if the request carries one.

    Returns:
        The validated claims, or None when there is no token or it is
        invalid. Endpoints that require authentication turn None into 401.
    """
    if credentials is None:
        return None

    result = security.token_validator.validate(credentials.credentials)
    if isinstance(result, InvalidToken):
        probe.authentication_failed(reason=result.reason)
        return None
    return result
