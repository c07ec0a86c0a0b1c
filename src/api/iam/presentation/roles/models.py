"""Pydantic models for role API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.domain.aggregates import Role, User


class CreateRoleRequest(BaseModel):
    """Request model for creating a role in the caller's tenant."""

    name: str = Field(..., description="Role name", min_length=1, max_length=256)
    description: str | None = Field(default=None, max_length=500)


class RoleResponse(BaseModel):
    """Response model for role."""

    id: str = Field(..., description="Role ID (ULID format)")
    name: str
    description: str | None = None
    tenant_id: str

    @classmethod
    def from_domain(cls, role: Role) -> RoleResponse:
        return cls(
            id=role.id.value,
            name=role.name,
            description=role.description,
            tenant_id=role.tenant_id.value,
        )


class RoleMemberResponse(BaseModel):
    """A user holding a role."""

    id: str
    email: str
    username: str
    is_active: bool

    @classmethod
    def from_domain(cls, user: User) -> RoleMemberResponse:
        return cls(
            id=user.id.value,
            email=user.email,
            username=user.username,
            is_active=user.is_active,
        )
