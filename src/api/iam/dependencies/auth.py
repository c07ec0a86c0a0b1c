"""Authentication service dependencies."""

from datetime import timedelta
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import AuthServiceProbe, DefaultAuthServiceProbe
from iam.application.services import AuthService, TenantService
from iam.dependencies.authentication import get_security_context
from iam.dependencies.tenant import get_tenant_service
from iam.infrastructure.credential_verifier import BcryptCredentialVerifier
from iam.infrastructure.refresh_token_repository import RefreshTokenRepository
from iam.infrastructure.role_repository import RoleRepository
from iam.infrastructure.user_repository import UserRepository
from infrastructure.database.dependencies import get_write_session
from infrastructure.settings import LockoutSettings, get_lockout_settings
from shared_kernel.auth import SecurityContext


def get_auth_service_probe() -> AuthServiceProbe:
    """Get AuthServiceProbe instance.

    Returns:
        DefaultAuthServiceProbe instance for observability
    """
    return DefaultAuthServiceProbe()


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> UserRepository:
    """Get UserRepository instance."""
    return UserRepository(session=session)


def get_role_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> RoleRepository:
    """Get RoleRepository instance."""
    return RoleRepository(session=session)


def get_refresh_token_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> RefreshTokenRepository:
    """Get RefreshTokenRepository instance."""
    return RefreshTokenRepository(session=session)


def get_credential_verifier(
    settings: Annotated[LockoutSettings, Depends(get_lockout_settings)],
) -> BcryptCredentialVerifier:
    """Get a credential verifier applying the configured lockout policy."""
    return BcryptCredentialVerifier(
        max_failed_attempts=settings.max_failed_attempts,
        lockout_duration=timedelta(minutes=settings.lockout_minutes),
    )


def get_auth_service(
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    role_repo: Annotated[RoleRepository, Depends(get_role_repository)],
    refresh_token_repo: Annotated[
        RefreshTokenRepository, Depends(get_refresh_token_repository)
    ],
    credential_verifier: Annotated[
        BcryptCredentialVerifier, Depends(get_credential_verifier)
    ],
    security: Annotated[SecurityContext, Depends(get_security_context)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    probe: Annotated[AuthServiceProbe, Depends(get_auth_service_probe)],
) -> AuthService:
    """Get AuthService instance.

    All repositories share the request's session via FastAPI dependency
    caching, so binding the session to a tenant scopes all of them.

    Returns:
        AuthService instance
    """
    return AuthService(
        tenant_service=tenant_service,
        user_repository=user_repo,
        role_repository=role_repo,
        refresh_token_repository=refresh_token_repo,
        credential_verifier=credential_verifier,
        token_issuer=security.token_issuer,
        session=session,
        probe=probe,
    )
