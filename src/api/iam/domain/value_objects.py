"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ulid import ULID

TENANT_IDENTIFIER_PATTERN = re.compile(r"^[a-z0-9-]+$")
TENANT_IDENTIFIER_MAX_LENGTH = 64


def normalize(value: str) -> str:
    """Normalize an email, username or role name for uniqueness checks."""
    return value.strip().upper()


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation. This
    is the internal id: it is what isolation filtering and the token's
    tenant claim use.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Args:
            value: ULID string (case-insensitive)

        Returns:
            TenantId instance with the canonical uppercase ULID

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            parsed = ULID.from_str(value.upper())
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=str(parsed))


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            parsed = ULID.from_str(value.upper())
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid UserId: {value}") from e

        return cls(value=str(parsed))


@dataclass(frozen=True)
class RoleId:
    """Identifier for a Role aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RoleId:
        """Generate a new RoleId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> RoleId:
        """Create RoleId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            parsed = ULID.from_str(value.upper())
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid RoleId: {value}") from e

        return cls(value=str(parsed))


@dataclass(frozen=True)
class TenantIdentifier:
    """Human-chosen, globally unique handle of a tenant.

    This is what clients send in the tenant header, route and query
    parameters. Lowercase letters, digits and hyphens only.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Tenant identifier must not be empty")
        if len(self.value) > TENANT_IDENTIFIER_MAX_LENGTH:
            raise ValueError(
                f"Tenant identifier must be at most "
                f"{TENANT_IDENTIFIER_MAX_LENGTH} characters"
            )
        if not TENANT_IDENTIFIER_PATTERN.match(self.value):
            raise ValueError(
                "Tenant identifier may only contain lowercase letters, "
                "digits and hyphens"
            )

    def __str__(self) -> str:
        """Return string representation."""
        return self.value
