"""Protocol for user administration service observability."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserServiceProbe(Protocol):
    """Domain probe for user administration operations."""

    def user_activation_changed(self, user_id: str, is_active: bool) -> None:
        """Record that a user was activated or deactivated."""
        ...

    def user_locked_out(self, user_id: str, until: datetime) -> None:
        """Record that an administrator locked a user out."""
        ...

    def user_unlocked(self, user_id: str) -> None:
        """Record that an administrator lifted a lockout."""
        ...

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> UserServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserServiceProbe:
    """Default implementation of UserServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultUserServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserServiceProbe(logger=self._logger, context=context)

    def user_activation_changed(self, user_id: str, is_active: bool) -> None:
        self._logger.info(
            "user_activation_changed",
            principal_id=user_id,
            is_active=is_active,
            **self._get_context_kwargs(),
        )

    def user_locked_out(self, user_id: str, until: datetime) -> None:
        self._logger.warning(
            "user_locked_out",
            principal_id=user_id,
            lockout_end=until.isoformat(),
            **self._get_context_kwargs(),
        )

    def user_unlocked(self, user_id: str) -> None:
        self._logger.info(
            "user_unlocked",
            principal_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str) -> None:
        self._logger.info(
            "user_deleted",
            principal_id=user_id,
            **self._get_context_kwargs(),
        )
