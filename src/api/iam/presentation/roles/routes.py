"""HTTP routes for tenant roles.

Every route requires a bearer token and acts on the caller's tenant.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import RoleService
from iam.dependencies.role import get_role_service
from iam.dependencies.user import get_current_user
from iam.domain.value_objects import RoleId, UserId
from iam.ports.exceptions import DuplicateRoleNameError
from iam.presentation.roles.models import (
    CreateRoleRequest,
    RoleMemberResponse,
    RoleResponse,
)

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
    dependencies=[Depends(get_current_user)],
)


def _parse_user_id(user_id: str) -> UserId:
    try:
        return UserId.from_string(user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid user ID format: {e}",
        ) from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_role(
    request: CreateRoleRequest,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleResponse:
    """Create a role.

    Raises:
        HTTPException: 409 if the tenant already has a role with this name
        HTTPException: 422 if the name is invalid
    """
    try:
        role = await service.create_role(request.name, request.description)
    except DuplicateRoleNameError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    return RoleResponse.from_domain(role)


@router.get("")
async def list_roles(
    service: Annotated[RoleService, Depends(get_role_service)],
) -> list[RoleResponse]:
    """List the roles of the caller's tenant."""
    roles = await service.list_roles()
    return [RoleResponse.from_domain(r) for r in roles]


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_role(
    role_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> None:
    """Delete a role and revoke it from everyone holding it."""
    try:
        role_id_obj = RoleId.from_string(role_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid role ID format: {e}",
        ) from e

    if not await service.delete_role(role_id_obj):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Role {role_id} not found",
        )


@router.get("/{role_name}/users")
async def list_users_in_role(
    role_name: str,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> list[RoleMemberResponse]:
    """List the users holding a role."""
    users = await service.list_users_in_role(role_name)
    if users is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Role {role_name} not found",
        )
    return [RoleMemberResponse.from_domain(u) for u in users]


@router.put(
    "/{role_name}/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def assign_role(
    role_name: str,
    user_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> None:
    """Grant a role to a user. Granting it again has no effect."""
    if not await service.assign_role(_parse_user_id(user_id), role_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User or role not found",
        )


@router.delete(
    "/{role_name}/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def remove_role(
    role_name: str,
    user_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> None:
    """Revoke a role from a user."""
    if not await service.remove_role(_parse_user_id(user_id), role_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User or role not found",
        )
