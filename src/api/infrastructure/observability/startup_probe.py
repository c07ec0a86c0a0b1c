"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_starting(self, app_name: str, version: str) -> None:
        """Record that the application began its startup sequence."""
        ...

    def application_ready(self, signing_mode: str) -> None:
        """Record that security material loaded and requests can be served."""
        ...

    def application_startup_failed(self, error: Exception) -> None:
        """Record that startup aborted."""
        ...

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def application_starting(self, app_name: str, version: str) -> None:
        """Record that the application began its startup sequence."""
        self._logger.info(
            "application_starting",
            app_name=app_name,
            version=version,
        )

    def application_ready(self, signing_mode: str) -> None:
        """Record that security material loaded and requests can be served."""
        self._logger.info(
            "application_ready",
            signing_mode=signing_mode,
        )

    def application_startup_failed(self, error: Exception) -> None:
        """Record that startup aborted."""
        self._logger.critical(
            "application_startup_failed",
            error=str(error),
            error_type=type(error).__name__,
        )

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        self._logger.info("application_stopped")
