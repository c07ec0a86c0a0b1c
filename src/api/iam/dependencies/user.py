"""Current user dependency."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from iam.application.observability import AuthenticationProbe
from iam.application.value_objects import CurrentUser
from iam.dependencies.authentication import (
    get_authentication_probe,
    get_token_claims,
)
from iam.domain.value_objects import TenantId, UserId
from shared_kernel.auth import TokenClaims


def get_current_user(
    claims: Annotated[TokenClaims | None, Depends(get_token_claims)],
    auth_probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
) -> CurrentUser:
    """Require a valid bearer token and build the current user from it.

    Raises:
        HTTPException 401: If the token is missing or invalid
    """
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = UserId.from_string(claims.user_id)
        tenant_id = TenantId.from_string(claims.tenant_id)
    except ValueError as e:
        auth_probe.authentication_failed(reason="malformed_identity_claims")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    username = claims.username or claims.user_id
    auth_probe.user_authenticated(
        user_id=user_id.value, tenant_id=tenant_id.value, username=username
    )
    return CurrentUser(
        user_id=user_id,
        tenant_id=tenant_id,
        email=claims.email,
        username=username,
        roles=claims.roles,
    )
