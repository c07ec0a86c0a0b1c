"""Tenant aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from iam.domain.value_objects import TenantId, TenantIdentifier

NAME_MAX_LENGTH = 256
CONNECTION_OVERRIDE_MAX_LENGTH = 1024


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValueError("Tenant name must not be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"Tenant name must be at most {NAME_MAX_LENGTH} characters")
    return name


def _validate_connection_override(value: str | None) -> str | None:
    if value is not None and len(value) > CONNECTION_OVERRIDE_MAX_LENGTH:
        raise ValueError(
            f"Connection override must be at most "
            f"{CONNECTION_OVERRIDE_MAX_LENGTH} characters"
        )
    return value


@dataclass
class Tenant:
    """Tenant aggregate representing an organization in the system.

    Tenants are the top-level isolation boundary in the system.
    Each tenant owns its users, roles and refresh tokens.

    Business rules:
    - The identifier is globally unique and never changes after creation
    - Only active tenants can authenticate or register principals
    - Connection overrides are stored for future per-tenant routing only
    """

    id: TenantId
    identifier: TenantIdentifier
    name: str
    is_active: bool = True
    connection_override: str | None = None
    settings: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        identifier: str,
        name: str,
        connection_override: str | None = None,
        settings: str | None = None,
    ) -> Tenant:
        """Factory method for creating a new, active tenant.

        Args:
            identifier: Public slug of the tenant
            name: Display name
            connection_override: Optional per-tenant connection string
            settings: Opaque settings blob

        Returns:
            A new Tenant aggregate

        Raises:
            ValueError: If the identifier or name is invalid
        """
        return cls(
            id=TenantId.generate(),
            identifier=TenantIdentifier(identifier),
            name=_validate_name(name),
            connection_override=_validate_connection_override(connection_override),
            settings=settings,
        )

    def update(
        self,
        name: str | None = None,
        settings: str | None = None,
        connection_override: str | None = None,
    ) -> None:
        """Apply a partial update. ``None`` leaves a field unchanged."""
        if name is not None:
            self.name = _validate_name(name)
        if settings is not None:
            self.settings = settings
        if connection_override is not None:
            self.connection_override = _validate_connection_override(
                connection_override
            )

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False
