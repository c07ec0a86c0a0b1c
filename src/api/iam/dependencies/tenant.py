"""Tenant registry dependencies.

Also provides ``get_current_tenant``, which binds the request's session
to the resolved tenant. Every tenant-scoped route depends on it.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from iam.application.services import TenantService
from iam.application.value_objects import TENANT_UNRESOLVED_MESSAGE
from iam.dependencies.tenant_context import get_tenant_context
from iam.domain.aggregates import Tenant
from iam.infrastructure.tenant_repository import TenantRepository
from infrastructure.database import bind_tenant
from infrastructure.database.dependencies import get_write_session
from shared_kernel.middleware import TenantContext


def get_tenant_service_probe() -> TenantServiceProbe:
    """Get TenantServiceProbe instance.

    Returns:
        DefaultTenantServiceProbe instance for observability
    """
    return DefaultTenantServiceProbe()


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> TenantRepository:
    """Get TenantRepository instance.

    Args:
        session: Async database session

    Returns:
        TenantRepository instance
    """
    return TenantRepository(session=session)


def get_tenant_service(
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repository)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    tenant_service_probe: Annotated[
        TenantServiceProbe, Depends(get_tenant_service_probe)
    ],
) -> TenantService:
    """Get TenantService instance.

    Args:
        tenant_repo: Tenant repository (shares session via FastAPI dependency caching)
        session: Database session for transaction management
        tenant_service_probe: Tenant service probe for observability

    Returns:
        TenantService instance
    """
    return TenantService(
        tenant_repository=tenant_repo,
        session=session,
        probe=tenant_service_probe,
    )


async def get_current_tenant(
    tenant_context: Annotated[TenantContext | None, Depends(get_tenant_context)],
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> Tenant:
    """Resolve the active tenant and bind the request's session to it.

    Raises:
        HTTPException 400: If no tenant could be resolved, or the resolved
            tenant does not exist or is inactive
    """
    if tenant_context is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=TENANT_UNRESOLVED_MESSAGE,
        )

    tenant = await tenant_service.resolve_active_tenant(tenant_context)
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or inactive tenant.",
        )

    bind_tenant(session, tenant.id.value)
    return tenant
