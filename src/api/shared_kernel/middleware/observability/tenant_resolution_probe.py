"""Domain probe for tenant resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving the tenant of a request
from claims, headers, route parameters and query parameters.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolutionProbe(Protocol):
    """Domain probe for tenant resolution operations."""

    def tenant_resolved(self, tenant: str, source: str) -> None:
        """Record that a tenant was resolved from a request signal."""
        ...

    def tenant_unresolved(self, authenticated: bool) -> None:
        """Record that no request signal carried a tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolutionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolutionProbe:
    """Default implementation of TenantResolutionProbe using structlog."""

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
    ) -> DefaultTenantResolutionProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolutionProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant: str, source: str) -> None:
        """Record that a tenant was resolved from a request signal."""
        self._logger.debug(
            "tenant_resolved",
            tenant=tenant,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(self, authenticated: bool) -> None:
        """Record that no request signal carried a tenant."""
        self._logger.info(
            "tenant_unresolved",
            authenticated=authenticated,
            **self._get_context_kwargs(),
        )
