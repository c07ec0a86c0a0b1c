"""Protocol for role application service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoleServiceProbe(Protocol):
    """Domain probe for role application service operations."""

    def role_created(self, role_id: str, name: str) -> None:
        """Record that a role was created."""
        ...

    def role_deleted(self, role_id: str) -> None:
        """Record that a role was deleted."""
        ...

    def role_assignment_changed(
        self, role_name: str, user_id: str, granted: bool
    ) -> None:
        """Record that a role was granted to or revoked from a user."""
        ...

    def with_context(self, context: ObservationContext) -> RoleServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoleServiceProbe:
    """Default implementation of RoleServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoleServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoleServiceProbe(logger=self._logger, context=context)

    def role_created(self, role_id: str, name: str) -> None:
        """Record that a role was created."""
        self._logger.info(
            "role_created",
            role_id=role_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def role_deleted(self, role_id: str) -> None:
        """Record that a role was deleted."""
        self._logger.info(
            "role_deleted",
            role_id=role_id,
            **self._get_context_kwargs(),
        )

    def role_assignment_changed(
        self, role_name: str, user_id: str, granted: bool
    ) -> None:
        """Record that a role was granted to or revoked from a user."""
        self._logger.info(
            "role_assignment_changed",
            role_name=role_name,
            principal_id=user_id,
            granted=granted,
            **self._get_context_kwargs(),
        )
