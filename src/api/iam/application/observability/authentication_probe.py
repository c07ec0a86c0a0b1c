"""Probe for bearer token authentication of incoming requests.

Successful authentications are recorded with the principal's tenant so
that cross-tenant activity can be traced per tenant. Failures carry only
the reason; the presented token is never logged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Domain probe for authenticating requests by bearer token."""

    def user_authenticated(self, user_id: str, tenant_id: str, username: str) -> None:
        """Record a request authenticated as a principal of a tenant."""
        ...

    def authentication_failed(self, reason: str) -> None:
        """Record a bearer token that could not be turned into a principal.

        Args:
            reason: Validation failure reason, or ``malformed_identity_claims``
                when a valid token carries unusable identifiers
        """
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe:
        ...


class DefaultAuthenticationProbe:
    """Structlog-backed AuthenticationProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthenticationProbe:
        return DefaultAuthenticationProbe(logger=self._logger, context=context)

    def user_authenticated(self, user_id: str, tenant_id: str, username: str) -> None:
        self._logger.debug(
            "request_authenticated",
            principal_id=user_id,
            principal_tenant_id=tenant_id,
            username=username,
            **self._get_context_kwargs(),
        )

    def authentication_failed(self, reason: str) -> None:
        self._logger.info(
            "bearer_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )
