"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database engine lifecycle."""

    def engine_created(self, host: str, database: str, pool_size: int) -> None:
        """Record that the database engine was created."""
        ...

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        ...


class TenantIsolationProbe(Protocol):
    """Domain probe for tenant isolation at the storage layer."""

    def cross_tenant_write_rejected(
        self,
        entity: str,
        bound_tenant_id: str,
        row_tenant_id: str | None,
    ) -> None:
        """Record that a write against another tenant's row was refused."""
        ...

    def with_context(self, context: ObservationContext) -> TenantIsolationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def engine_created(self, host: str, database: str, pool_size: int) -> None:
        """Record that the database engine was created."""
        self._logger.info(
            "database_engine_created",
            host=host,
            database=database,
            pool_size=pool_size,
        )

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        self._logger.info("database_pool_closed")


class DefaultTenantIsolationProbe:
    """Default implementation of TenantIsolationProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantIsolationProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantIsolationProbe(logger=self._logger, context=context)

    def cross_tenant_write_rejected(
        self,
        entity: str,
        bound_tenant_id: str,
        row_tenant_id: str | None,
    ) -> None:
        """Record that a write against another tenant's row was refused."""
        self._logger.warning(
            "cross_tenant_write_rejected",
            entity=entity,
            bound_tenant_id=bound_tenant_id,
            row_tenant_id=row_tenant_id,
            **self._get_context_kwargs(),
        )
