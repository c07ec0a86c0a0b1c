"""Pydantic models for user administration responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from iam.application.value_objects import PrincipalView
from iam.domain.aggregates import User


class UserSummaryResponse(BaseModel):
    """A user as listed for administrators."""

    id: str = Field(..., description="User ID (ULID format)")
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    tenant_id: str
    is_active: bool
    lockout_end: datetime | None = None

    @classmethod
    def from_domain(cls, user: User) -> UserSummaryResponse:
        return cls(
            id=user.id.value,
            email=user.email,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            tenant_id=user.tenant_id.value,
            is_active=user.is_active,
            lockout_end=user.lockout_end,
        )


class UserDetailResponse(BaseModel):
    """A single user with the roles granted to them."""

    id: str
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    tenant_id: str
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_view(cls, principal: PrincipalView) -> UserDetailResponse:
        return cls(
            id=principal.id,
            email=principal.email,
            username=principal.username,
            first_name=principal.first_name,
            last_name=principal.last_name,
            tenant_id=principal.tenant_id,
            roles=list(principal.roles),
        )


class LockoutResponse(BaseModel):
    """End of an administrator-imposed lockout."""

    lockout_end: datetime
