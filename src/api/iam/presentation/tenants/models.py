"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from iam.domain.aggregates import Tenant


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant."""

    identifier: str = Field(
        ...,
        description="Public tenant handle (lowercase letters, digits, hyphens)",
        min_length=1,
        max_length=64,
        pattern=r"^[a-z0-9-]+$",
    )
    name: str = Field(..., description="Tenant name", min_length=1, max_length=256)
    connection_override: str | None = Field(
        default=None,
        description="Per-tenant connection string, stored for future routing",
        max_length=1024,
    )
    settings: str | None = Field(default=None, description="Opaque settings blob")


class UpdateTenantRequest(BaseModel):
    """Request model for a partial tenant update.

    Omitted fields are left unchanged.
    """

    name: str | None = Field(default=None, min_length=1, max_length=256)
    connection_override: str | None = Field(default=None, max_length=1024)
    settings: str | None = None
    is_active: bool | None = None


class TenantResponse(BaseModel):
    """Response model for tenant.

    The connection override is never returned.
    """

    id: str = Field(..., description="Tenant ID (ULID format)")
    identifier: str = Field(..., description="Public tenant handle")
    name: str = Field(..., description="Tenant name")
    is_active: bool = Field(..., description="Whether principals may sign in")
    settings: str | None = Field(default=None, description="Opaque settings blob")
    created_at: datetime

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response.

        Args:
            tenant: Tenant domain aggregate

        Returns:
            TenantResponse
        """
        return cls(
            id=tenant.id.value,
            identifier=tenant.identifier.value,
            name=tenant.name,
            is_active=tenant.is_active,
            settings=tenant.settings,
            created_at=tenant.created_at,
        )
