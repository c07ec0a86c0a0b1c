"""HTTP routes for authentication.

Login and registration are offered both at a fixed path, where the tenant
comes from the header, query string or token, and under a ``{tenant}``
path segment.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from iam.application.services import AuthService
from iam.application.value_objects import (
    AuthFailure,
    AuthResult,
    AuthState,
    CurrentUser,
    RegistrationRequest,
)
from iam.dependencies.auth import get_auth_service
from iam.dependencies.tenant_context import get_tenant_context
from iam.dependencies.user import get_current_user
from iam.presentation.auth.models import (
    AuthResponse,
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    PrincipalResponse,
    RefreshRequest,
    RegisterRequest,
)
from shared_kernel.middleware import TenantContext

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)

_FAILURE_STATUS = {
    AuthState.TENANT_UNRESOLVED: status.HTTP_400_BAD_REQUEST,
    AuthState.REJECTED: status.HTTP_401_UNAUTHORIZED,
    AuthState.LOCKED: status.HTTP_403_FORBIDDEN,
    AuthState.TWO_FACTOR_REQUIRED: status.HTTP_403_FORBIDDEN,
}

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


def _failure_response(
    failure: AuthFailure, status_code: int | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or _FAILURE_STATUS[failure.state],
        content={"errors": list(failure.errors)},
    )


def _to_response(result: AuthResult) -> AuthResponse | JSONResponse:
    if isinstance(result, AuthFailure):
        return _failure_response(result)
    return AuthResponse.from_result(result)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses=_ERROR_RESPONSES,
)
@router.post(
    "/{tenant}/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses=_ERROR_RESPONSES,
)
async def register(
    request: RegisterRequest,
    tenant_context: Annotated[TenantContext | None, Depends(get_tenant_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse | JSONResponse:
    """Register a principal in the resolved tenant and sign them in.

    Every refusal is a 400 with the reasons in ``errors``.
    """
    result = await service.register(
        tenant_context,
        RegistrationRequest(
            email=request.email,
            password=request.password,
            username=request.user_name,
            first_name=request.first_name,
            last_name=request.last_name,
        ),
    )
    if isinstance(result, AuthFailure):
        return _failure_response(result, status.HTTP_400_BAD_REQUEST)
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse, responses=_ERROR_RESPONSES)
@router.post(
    "/{tenant}/login", response_model=AuthResponse, responses=_ERROR_RESPONSES
)
async def login(
    request: LoginRequest,
    tenant_context: Annotated[TenantContext | None, Depends(get_tenant_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse | JSONResponse:
    """Sign in with email and password.

    Returns 400 when no tenant could be identified, 401 for any
    credential or tenant mismatch and 403 for locked accounts or when a
    second factor is required.
    """
    result = await service.login(tenant_context, request.email, request.password)
    return _to_response(result)


@router.post("/refresh", response_model=AuthResponse, responses=_ERROR_RESPONSES)
async def refresh(
    request: RefreshRequest,
    tenant_context: Annotated[TenantContext | None, Depends(get_tenant_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse | JSONResponse:
    """Exchange a refresh token for new tokens.

    The presented refresh token cannot be used again.
    """
    result = await service.refresh(tenant_context, request.refresh_token)
    return _to_response(result)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> None:
    """Revoke the caller's refresh token.

    The access token stays valid until it expires.
    """
    await service.logout(current_user)


@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={400: {"model": ErrorResponse}},
)
async def change_password(
    request: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse | None:
    """Change the caller's password.

    Every refusal is a 400 with the reasons in ``errors``. On success the
    caller's refresh token is revoked.
    """
    failure = await service.change_password(
        current_user, request.current_password, request.new_password
    )
    if failure is not None:
        return _failure_response(failure, status.HTTP_400_BAD_REQUEST)
    return None


@router.get("/me")
async def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> PrincipalResponse:
    """Get the authenticated principal.

    Raises:
        HTTPException: 404 if the principal no longer exists or is inactive
    """
    principal = await service.get_current_principal(current_user)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return PrincipalResponse.from_view(principal)
