"""Role service dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultRoleServiceProbe, RoleServiceProbe
from iam.application.services import RoleService
from iam.dependencies.auth import get_role_repository, get_user_repository
from iam.dependencies.tenant import get_current_tenant
from iam.domain.aggregates import Tenant
from iam.infrastructure.role_repository import RoleRepository
from iam.infrastructure.user_repository import UserRepository
from infrastructure.database.dependencies import get_write_session


def get_role_service_probe() -> RoleServiceProbe:
    """Get RoleServiceProbe instance.

    Returns:
        DefaultRoleServiceProbe instance for observability
    """
    return DefaultRoleServiceProbe()


def get_role_service(
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    role_repo: Annotated[RoleRepository, Depends(get_role_repository)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    probe: Annotated[RoleServiceProbe, Depends(get_role_service_probe)],
) -> RoleService:
    """Get a RoleService scoped to the request's tenant.

    Depends on ``get_current_tenant``, which binds the shared session
    before any repository touches it.
    """
    return RoleService(
        role_repository=role_repo,
        user_repository=user_repo,
        session=session,
        tenant_id=tenant.id,
        probe=probe,
    )
