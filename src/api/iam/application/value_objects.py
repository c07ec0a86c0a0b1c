"""Application-layer value objects for IAM bounded context.

These are value objects specific to the application layer, representing
cross-cutting concerns like authentication context, service inputs and
the discriminated outcomes of authentication.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId

TENANT_UNRESOLVED_MESSAGE = (
    "Tenant identification required. Please provide the X-Tenant-Id header."
)
INVALID_CREDENTIALS_MESSAGE = "Invalid tenant or credentials."
LOCKED_OUT_MESSAGE = "Account is locked. Please try again later."
TWO_FACTOR_REQUIRED_MESSAGE = "Two-factor authentication required."
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid refresh token."
INCORRECT_PASSWORD_MESSAGE = "Current password is incorrect."
USER_NOT_FOUND_MESSAGE = "User not found."


@dataclass(frozen=True)
class CurrentUser:
    """Represents the currently authenticated principal with tenant context.

    Built from the claims of a validated access token and used throughout
    the request lifecycle.
    """

    user_id: UserId
    tenant_id: TenantId
    email: str | None = None
    username: str | None = None
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class RegistrationRequest:
    """Input for registering a principal in the resolved tenant."""

    email: str
    password: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class AuthState(StrEnum):
    """Terminal states of a login or registration attempt."""

    TENANT_UNRESOLVED = "tenant_unresolved"
    REJECTED = "rejected"
    LOCKED = "locked"
    TWO_FACTOR_REQUIRED = "two_factor_required"
    ISSUED = "issued"


@dataclass(frozen=True)
class PrincipalView:
    """Read-only view of a principal returned with issued tokens."""

    id: str
    email: str
    username: str
    tenant_id: str
    first_name: str | None = None
    last_name: str | None = None
    roles: tuple[str, ...] = ()

    @classmethod
    def from_user(cls, user: User, roles: list[str] | tuple[str, ...]) -> PrincipalView:
        return cls(
            id=user.id.value,
            email=user.email,
            username=user.username,
            tenant_id=user.tenant_id.value,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=tuple(roles),
        )


@dataclass(frozen=True)
class AuthSuccess:
    """Tokens issued to a principal."""

    access_token: str
    refresh_token: str
    access_token_expiration: datetime
    refresh_token_expiration: datetime
    principal: PrincipalView
    state: AuthState = AuthState.ISSUED


@dataclass(frozen=True)
class AuthFailure:
    """A refused login, registration or refresh.

    ``errors`` is safe to return to the caller verbatim.
    """

    state: AuthState
    errors: tuple[str, ...]


AuthResult = AuthSuccess | AuthFailure
