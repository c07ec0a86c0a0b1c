"""Domain probes for token signing, issuance and validation.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of the token subsystem. Validation failure
reasons are only ever recorded here; callers see a uniform outcome.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SigningKeyProbe(Protocol):
    """Domain probe for signing key loading at startup."""

    def signing_keys_loaded(
        self, mode: str, algorithm: str, key_id: str | None
    ) -> None:
        """Record that signing key material was loaded."""
        ...

    def signing_keys_misconfigured(self, mode: str, reason: str) -> None:
        """Record that signing key material could not be loaded."""
        ...


class TokenIssuerProbe(Protocol):
    """Domain probe for token issuance."""

    def access_token_issued(
        self, user_id: str, tenant_id: str, token_id: str, role_count: int
    ) -> None:
        """Record that an access token was minted."""
        ...

    def refresh_token_issued(self) -> None:
        """Record that a refresh token was generated."""
        ...

    def with_context(self, context: ObservationContext) -> TokenIssuerProbe:
        """Create a new probe with observation context bound."""
        ...


class TokenValidatorProbe(Protocol):
    """Domain probe for token validation."""

    def token_validated(self, user_id: str, tenant_id: str) -> None:
        """Record that a token was successfully validated."""
        ...

    def token_validation_failed(self, reason: str) -> None:
        """Record that token validation failed."""
        ...

    def with_context(self, context: ObservationContext) -> TokenValidatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSigningKeyProbe:
    """Default implementation of SigningKeyProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def signing_keys_loaded(
        self, mode: str, algorithm: str, key_id: str | None
    ) -> None:
        """Record that signing key material was loaded."""
        self._logger.info(
            "signing_keys_loaded",
            mode=mode,
            algorithm=algorithm,
            key_id=key_id,
        )

    def signing_keys_misconfigured(self, mode: str, reason: str) -> None:
        """Record that signing key material could not be loaded."""
        self._logger.critical(
            "signing_keys_misconfigured",
            mode=mode,
            reason=reason,
        )


class DefaultTokenIssuerProbe:
    """Default implementation of TokenIssuerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTokenIssuerProbe:
        """Create a new probe with observation context bound."""
        return DefaultTokenIssuerProbe(logger=self._logger, context=context)

    def access_token_issued(
        self, user_id: str, tenant_id: str, token_id: str, role_count: int
    ) -> None:
        """Record that an access token was minted."""
        self._logger.info(
            "access_token_issued",
            user_id=user_id,
            token_tenant_id=tenant_id,
            token_id=token_id,
            role_count=role_count,
            **self._get_context_kwargs(),
        )

    def refresh_token_issued(self) -> None:
        """Record that a refresh token was generated."""
        self._logger.debug(
            "refresh_token_issued",
            **self._get_context_kwargs(),
        )


class DefaultTokenValidatorProbe:
    """Default implementation of TokenValidatorProbe using structlog."""

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
    ) -> DefaultTokenValidatorProbe:
        """Create a new probe with observation context bound."""
        return DefaultTokenValidatorProbe(logger=self._logger, context=context)

    def token_validated(self, user_id: str, tenant_id: str) -> None:
        """Record that a token was successfully validated."""
        self._logger.debug(
            "token_validated",
            user_id=user_id,
            token_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def token_validation_failed(self, reason: str) -> None:
        """Record that token validation failed."""
        self._logger.warning(
            "token_validation_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )
