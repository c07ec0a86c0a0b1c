"""Protocol for authentication service observability.

Records the outcome of every login, registration, refresh and logout.
The reasons recorded here are internal; callers only ever see the
generic messages of the returned failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthServiceProbe(Protocol):
    """Domain probe for authentication service operations."""

    def login_succeeded(self, user_id: str, tenant_id: str) -> None:
        """Record that a principal logged in."""
        ...

    def login_failed(self, state: str, reason: str) -> None:
        """Record that a login attempt was refused."""
        ...

    def user_registered(self, user_id: str, tenant_id: str) -> None:
        """Record that a principal registered."""
        ...

    def registration_failed(self, reason: str) -> None:
        """Record that a registration was refused."""
        ...

    def token_refreshed(self, user_id: str) -> None:
        """Record that a refresh token was exchanged."""
        ...

    def refresh_failed(self, reason: str) -> None:
        """Record that a refresh token exchange was refused."""
        ...

    def user_logged_out(self, user_id: str, token_revoked: bool) -> None:
        """Record that a principal logged out."""
        ...

    def password_changed(self, user_id: str) -> None:
        """Record that a principal changed their password."""
        ...

    def password_change_failed(self, reason: str) -> None:
        """Record that a password change was refused."""
        ...

    def with_context(self, context: ObservationContext) -> AuthServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthServiceProbe:
    """Default implementation of AuthServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthServiceProbe(logger=self._logger, context=context)

    def login_succeeded(self, user_id: str, tenant_id: str) -> None:
        """Record that a principal logged in."""
        self._logger.info(
            "login_succeeded",
            principal_id=user_id,
            principal_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def login_failed(self, state: str, reason: str) -> None:
        """Record that a login attempt was refused."""
        self._logger.warning(
            "login_failed",
            state=state,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def user_registered(self, user_id: str, tenant_id: str) -> None:
        """Record that a principal registered."""
        self._logger.info(
            "user_registered",
            principal_id=user_id,
            principal_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def registration_failed(self, reason: str) -> None:
        """Record that a registration was refused."""
        self._logger.info(
            "registration_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def token_refreshed(self, user_id: str) -> None:
        """Record that a refresh token was exchanged."""
        self._logger.info(
            "token_refreshed",
            principal_id=user_id,
            **self._get_context_kwargs(),
        )

    def refresh_failed(self, reason: str) -> None:
        """Record that a refresh token exchange was refused."""
        self._logger.warning(
            "refresh_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def user_logged_out(self, user_id: str, token_revoked: bool) -> None:
        """Record that a principal logged out."""
        self._logger.info(
            "user_logged_out",
            principal_id=user_id,
            token_revoked=token_revoked,
            **self._get_context_kwargs(),
        )

    def password_changed(self, user_id: str) -> None:
        """Record that a principal changed their password."""
        self._logger.info(
            "password_changed",
            principal_id=user_id,
            **self._get_context_kwargs(),
        )

    def password_change_failed(self, reason: str) -> None:
        """Record that a password change was refused."""
        self._logger.warning(
            "password_change_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )
