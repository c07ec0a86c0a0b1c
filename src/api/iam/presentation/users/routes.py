"""HTTP routes for administering the users of a tenant.

Every route requires a bearer token and acts on the caller's tenant;
users of other tenants answer 404.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from iam.application.services import UserService
from iam.dependencies.user import get_current_user
from iam.dependencies.user_admin import get_user_service
from iam.domain.value_objects import UserId
from iam.presentation.users.models import (
    LockoutResponse,
    UserDetailResponse,
    UserSummaryResponse,
)

router = APIRouter(
    prefix="/users",
    tags=["users"],
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


def _not_found(user_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"User {user_id} not found",
    )


@router.get("")
async def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[UserSummaryResponse]:
    """List the users of the caller's tenant."""
    users = await service.list_users()
    return [UserSummaryResponse.from_domain(u) for u in users]


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserDetailResponse:
    """Get a user and the roles granted to them."""
    principal = await service.get_user(_parse_user_id(user_id))
    if principal is None:
        raise _not_found(user_id)
    return UserDetailResponse.from_view(principal)


@router.post(
    "/{user_id}/activate",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def activate_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> None:
    """Allow a user to sign in again."""
    if not await service.set_active(_parse_user_id(user_id), True):
        raise _not_found(user_id)


@router.post(
    "/{user_id}/deactivate",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def deactivate_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> None:
    """Stop a user from signing in or refreshing tokens."""
    if not await service.set_active(_parse_user_id(user_id), False):
        raise _not_found(user_id)


@router.post("/{user_id}/lockout")
async def lock_out_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
    duration_minutes: Annotated[int | None, Query(alias="durationMinutes", ge=1)] = None,
) -> LockoutResponse:
    """Lock a user out for ``durationMinutes``, or indefinitely."""
    duration = timedelta(minutes=duration_minutes) if duration_minutes else None
    until = await service.lock_out(_parse_user_id(user_id), duration)
    if until is None:
        raise _not_found(user_id)
    return LockoutResponse(lockout_end=until)


@router.post(
    "/{user_id}/unlock",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def unlock_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> None:
    """Lift a lockout and reset the failed attempt count."""
    if not await service.unlock(_parse_user_id(user_id)):
        raise _not_found(user_id)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
) -> None:
    """Delete a user along with their role grants and refresh token."""
    if not await service.delete_user(_parse_user_id(user_id)):
        raise _not_found(user_id)
