"""Repository protocols (ports) for IAM bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. Repositories of tenant-scoped aggregates (users, roles,
refresh tokens) operate on a session bound to the resolved tenant, so
their lookups never take a tenant argument and never see other tenants.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.aggregates import RefreshToken, Role, Tenant, User
from iam.domain.value_objects import RoleId, TenantId, UserId


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence.

    Tenants are not tenant-scoped themselves; this repository sees every
    tenant regardless of the session's bound tenant.
    """

    async def save(self, tenant: Tenant) -> None:
        """Persist a tenant aggregate.

        Creates a new tenant or updates an existing one.

        Args:
            tenant: The Tenant aggregate to persist

        Raises:
            DuplicateTenantIdentifierError: If the identifier is already taken
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its internal ID.

        Returns:
            The Tenant aggregate, or None if not found
        """
        ...

    async def get_by_identifier(self, identifier: str) -> Tenant | None:
        """Retrieve a tenant by its public identifier.

        Returns:
            The Tenant aggregate, or None if not found
        """
        ...

    async def list_all(self) -> list[Tenant]:
        """List all tenants, ordered by identifier."""
        ...

    async def count_users(self, tenant_id: TenantId) -> int:
        """Count the principals that belong to a tenant."""
        ...

    async def delete(self, tenant: Tenant) -> bool:
        """Delete a tenant.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence within the bound tenant."""

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserError: If the email or username is taken in the tenant
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Returns:
            The User aggregate, or None if not found in the bound tenant
        """
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email, compared in normalized form.

        Returns:
            The User aggregate, or None if not found in the bound tenant
        """
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by username, compared in normalized form."""
        ...

    async def list_all(self) -> list[User]:
        """List the tenant's users, ordered by normalized email."""
        ...

    async def delete(self, user: User) -> bool:
        """Delete a user together with their role grants and refresh token.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IRoleRepository(Protocol):
    """Repository for Role aggregates and role grants within the bound tenant."""

    async def save(self, role: Role) -> None:
        """Persist a role.

        Raises:
            DuplicateRoleNameError: If the name is taken in the tenant
        """
        ...

    async def get_by_id(self, role_id: RoleId) -> Role | None:
        """Retrieve a role by its ID."""
        ...

    async def get_by_name(self, name: str) -> Role | None:
        """Retrieve a role by name, compared in normalized form."""
        ...

    async def list_all(self) -> list[Role]:
        """List the tenant's roles, ordered by name."""
        ...

    async def delete(self, role: Role) -> bool:
        """Delete a role together with its grants.

        Returns:
            True if deleted, False if not found
        """
        ...

    async def role_names_for_user(self, user_id: UserId) -> list[str]:
        """Names of the roles granted to a user."""
        ...

    async def add_user(self, role: Role, user_id: UserId) -> bool:
        """Grant a role to a user.

        Returns:
            True if granted, False if the user already had it
        """
        ...

    async def remove_user(self, role: Role, user_id: UserId) -> bool:
        """Revoke a role from a user.

        Returns:
            True if revoked, False if the user did not have it
        """
        ...

    async def list_users(self, role: Role) -> list[User]:
        """Users holding a role."""
        ...


@runtime_checkable
class IRefreshTokenRepository(Protocol):
    """Repository for the single active refresh token of each principal."""

    async def store(self, token: RefreshToken) -> None:
        """Store a refresh token, replacing the principal's previous one."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> RefreshToken | None:
        """Look up a refresh token by the digest of its value."""
        ...

    async def revoke(self, user_id: UserId) -> bool:
        """Remove a principal's refresh token.

        Returns:
            True if a token was removed, False if there was none
        """
        ...
