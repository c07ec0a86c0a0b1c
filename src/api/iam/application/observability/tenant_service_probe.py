"""Protocol for tenant application service observability.

Defines the interface for domain probes that capture application-level
domain events for tenant service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_created(self, tenant_id: str, identifier: str) -> None:
        """Record that a tenant was created."""
        ...

    def tenant_updated(self, tenant_id: str) -> None:
        """Record that a tenant was updated."""
        ...

    def tenant_activation_changed(self, tenant_id: str, is_active: bool) -> None:
        """Record that a tenant was activated or deactivated."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        ...

    def tenant_not_found(self, tenant: str) -> None:
        """Record that a tenant was not found."""
        ...

    def tenant_inactive(self, tenant_id: str) -> None:
        """Record that an inactive tenant was requested."""
        ...

    def duplicate_tenant_identifier(self, identifier: str) -> None:
        """Record that a duplicate tenant identifier was detected."""
        ...

    def tenant_deletion_blocked(self, tenant_id: str, user_count: int) -> None:
        """Record that deleting a tenant was refused because it has users."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_created(self, tenant_id: str, identifier: str) -> None:
        """Record that a tenant was created."""
        self._logger.info(
            "tenant_created",
            created_tenant_id=tenant_id,
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: str) -> None:
        """Record that a tenant was updated."""
        self._logger.info(
            "tenant_updated",
            updated_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_activation_changed(self, tenant_id: str, is_active: bool) -> None:
        """Record that a tenant was activated or deactivated."""
        self._logger.info(
            "tenant_activation_changed",
            changed_tenant_id=tenant_id,
            is_active=is_active,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was deleted."""
        self._logger.info(
            "tenant_deleted",
            deleted_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant: str) -> None:
        """Record that a tenant was not found."""
        self._logger.debug(
            "tenant_not_found",
            tenant=tenant,
            **self._get_context_kwargs(),
        )

    def tenant_inactive(self, tenant_id: str) -> None:
        """Record that an inactive tenant was requested."""
        self._logger.info(
            "tenant_inactive",
            inactive_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_identifier(self, identifier: str) -> None:
        """Record that a duplicate tenant identifier was detected."""
        self._logger.warning(
            "duplicate_tenant_identifier",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_deletion_blocked(self, tenant_id: str, user_count: int) -> None:
        """Record that deleting a tenant was refused because it has users."""
        self._logger.warning(
            "tenant_deletion_blocked",
            blocked_tenant_id=tenant_id,
            user_count=user_count,
            **self._get_context_kwargs(),
        )
