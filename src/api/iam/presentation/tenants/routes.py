"""HTTP routes for tenant administration.

These routes manage the tenant registry itself and are not tenant-scoped.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import TenantService
from iam.dependencies.tenant import get_tenant_service
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import DuplicateTenantIdentifierError, TenantHasUsersError
from iam.presentation.tenants.models import (
    CreateTenantRequest,
    TenantResponse,
    UpdateTenantRequest,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


def _not_found(tenant: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Tenant {tenant} not found",
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(
    request: CreateTenantRequest,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Create a new tenant.

    Args:
        request: Tenant creation request
        service: Tenant service for orchestration

    Returns:
        TenantResponse with created tenant details

    Raises:
        HTTPException: 409 if the identifier is already taken
        HTTPException: 422 if the request is invalid
    """
    try:
        tenant = await service.create_tenant(
            identifier=request.identifier,
            name=request.name,
            connection_override=request.connection_override,
            settings=request.settings,
        )
    except DuplicateTenantIdentifierError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return TenantResponse.from_domain(tenant)


@router.get("")
async def list_tenants(
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List all tenants."""
    tenants = await service.list_tenants()
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/by-identifier/{identifier}")
async def get_tenant_by_identifier(
    identifier: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get a tenant by its public identifier.

    Raises:
        HTTPException: 404 if tenant not found
    """
    tenant = await service.get_tenant_by_identifier(identifier)
    if tenant is None:
        raise _not_found(identifier)
    return TenantResponse.from_domain(tenant)


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get tenant by ID.

    Args:
        tenant_id: Tenant ID (ULID format)
        service: Tenant service

    Returns:
        TenantResponse with tenant details

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
    """
    tenant = await service.get_tenant(_parse_tenant_id(tenant_id))
    if tenant is None:
        raise _not_found(tenant_id)
    return TenantResponse.from_domain(tenant)


@router.patch("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    request: UpdateTenantRequest,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Partially update a tenant.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 422 if a new value is invalid
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)
    try:
        tenant = await service.update_tenant(
            tenant_id_obj,
            name=request.name,
            settings=request.settings,
            connection_override=request.connection_override,
            is_active=request.is_active,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    if tenant is None:
        raise _not_found(tenant_id)
    return TenantResponse.from_domain(tenant)


@router.post(
    "/{tenant_id}/activate",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def activate_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> None:
    """Activate a tenant."""
    if not await service.activate_tenant(_parse_tenant_id(tenant_id)):
        raise _not_found(tenant_id)


@router.post(
    "/{tenant_id}/deactivate",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def deactivate_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> None:
    """Deactivate a tenant.

    Principals of an inactive tenant can no longer sign in.
    """
    if not await service.deactivate_tenant(_parse_tenant_id(tenant_id)):
        raise _not_found(tenant_id)


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={
        204: {"description": "Tenant deleted successfully"},
        400: {"description": "Invalid tenant ID format"},
        404: {"description": "Tenant not found"},
        409: {"description": "Tenant still has users"},
    },
)
async def delete_tenant(
    tenant_id: str,
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> None:
    """Delete a tenant.

    Args:
        tenant_id: Tenant ID (ULID format)
        service: Tenant service

    Returns:
        None (204 No Content on success)

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 409 if users still belong to the tenant
    """
    try:
        deleted = await service.delete_tenant(_parse_tenant_id(tenant_id))
    except TenantHasUsersError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e

    if not deleted:
        raise _not_found(tenant_id)
