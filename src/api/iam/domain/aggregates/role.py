"""Role aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from iam.domain.value_objects import RoleId, TenantId, normalize

NAME_MAX_LENGTH = 256


@dataclass
class Role:
    """Named role granted to principals of one tenant.

    Role names are unique per tenant, compared in normalized form.
    Granted role names are embedded in issued access tokens.
    """

    id: RoleId
    tenant_id: TenantId
    name: str
    description: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls, tenant_id: TenantId, name: str, description: str | None = None
    ) -> Role:
        """Factory method for creating a role.

        Raises:
            ValueError: If the name is empty or too long
        """
        name = name.strip()
        if not name:
            raise ValueError("Role name must not be empty")
        if len(name) > NAME_MAX_LENGTH:
            raise ValueError(f"Role name must be at most {NAME_MAX_LENGTH} characters")
        return cls(
            id=RoleId.generate(),
            tenant_id=tenant_id,
            name=name,
            description=description,
        )

    @property
    def normalized_name(self) -> str:
        return normalize(self.name)
