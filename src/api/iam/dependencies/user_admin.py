"""User administration service dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultUserServiceProbe, UserServiceProbe
from iam.application.services import UserService
from iam.dependencies.auth import get_role_repository, get_user_repository
from iam.dependencies.tenant import get_current_tenant
from iam.domain.aggregates import Tenant
from iam.infrastructure.role_repository import RoleRepository
from iam.infrastructure.user_repository import UserRepository
from infrastructure.database.dependencies import get_write_session


def get_user_service_probe() -> UserServiceProbe:
    """Get UserServiceProbe instance."""
    return DefaultUserServiceProbe()


def get_user_service(
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    role_repo: Annotated[RoleRepository, Depends(get_role_repository)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    probe: Annotated[UserServiceProbe, Depends(get_user_service_probe)],
) -> UserService:
    """Get a UserService scoped to the request's tenant.

    ``tenant`` is only depended on so that ``get_current_tenant`` binds the
    shared session before any repository touches it.
    """
    return UserService(
        user_repository=user_repo,
        role_repository=role_repo,
        session=session,
        probe=probe,
    )
