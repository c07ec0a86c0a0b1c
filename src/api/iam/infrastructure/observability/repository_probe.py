"""Domain probe for IAM repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to tenant, user, role and refresh
token repository operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations.

    Records domain events during user persistence operations.
    """

    def user_saved(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was successfully saved."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        ...

    def duplicate_user(self, tenant_id: str) -> None:
        """Record that an email or username collided within a tenant."""
        ...

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        ...

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        ...

    def duplicate_tenant_identifier(self, identifier: str) -> None:
        """Record that a duplicate tenant identifier was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class RoleRepositoryProbe(Protocol):
    """Domain probe for role repository operations."""

    def role_saved(self, role_id: str, tenant_id: str) -> None:
        """Record that a role was saved."""
        ...

    def role_deleted(self, role_id: str) -> None:
        """Record that a role was deleted."""
        ...

    def duplicate_role_name(self, name: str, tenant_id: str) -> None:
        """Record that a role name collided within a tenant."""
        ...

    def role_granted(self, role_id: str, user_id: str) -> None:
        """Record that a role was granted to a user."""
        ...

    def role_revoked(self, role_id: str, user_id: str) -> None:
        """Record that a role was revoked from a user."""
        ...

    def with_context(self, context: ObservationContext) -> RoleRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class _StructlogProbe:
    """Shared structlog plumbing for the default repository probes."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext):
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)


class DefaultUserRepositoryProbe(_StructlogProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def user_saved(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was successfully saved."""
        self._logger.info(
            "user_saved",
            user_id=user_id,
            owner_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def duplicate_user(self, tenant_id: str) -> None:
        """Record that an email or username collided within a tenant."""
        self._logger.warning(
            "duplicate_user",
            owner_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            **self._get_context_kwargs(),
        )


class DefaultTenantRepositoryProbe(_StructlogProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        self._logger.info(
            "tenant_saved",
            saved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        self._logger.debug(
            "tenant_retrieved",
            retrieved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        self._logger.info(
            "tenant_deleted",
            deleted_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        self._logger.debug(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_identifier(self, identifier: str) -> None:
        """Record that a duplicate tenant identifier was detected."""
        self._logger.warning(
            "duplicate_tenant_identifier",
            identifier=identifier,
            **self._get_context_kwargs(),
        )


class DefaultRoleRepositoryProbe(_StructlogProbe):
    """Default implementation of RoleRepositoryProbe using structlog."""

    def role_saved(self, role_id: str, tenant_id: str) -> None:
        """Record that a role was saved."""
        self._logger.info(
            "role_saved",
            role_id=role_id,
            owner_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def role_deleted(self, role_id: str) -> None:
        """Record that a role was deleted."""
        self._logger.info(
            "role_deleted",
            role_id=role_id,
            **self._get_context_kwargs(),
        )

    def duplicate_role_name(self, name: str, tenant_id: str) -> None:
        """Record that a role name collided within a tenant."""
        self._logger.warning(
            "duplicate_role_name",
            name=name,
            owner_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def role_granted(self, role_id: str, user_id: str) -> None:
        """Record that a role was granted to a user."""
        self._logger.info(
            "role_granted",
            role_id=role_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def role_revoked(self, role_id: str, user_id: str) -> None:
        """Record that a role was revoked from a user."""
        self._logger.info(
            "role_revoked",
            role_id=role_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )
