"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import structlog

from iam.application.observability import (
    DefaultAuthServiceProbe,
    DefaultAuthenticationProbe,
    DefaultTenantServiceProbe,
    DefaultUserServiceProbe,
)
from infrastructure.observability import (
    DefaultConnectionProbe,
    DefaultStartupProbe,
    DefaultTenantIsolationProbe,
    ObservationContext,
)
from shared_kernel.middleware.observability import DefaultTenantResolutionProbe


def mock_logger() -> MagicMock:
    return MagicMock(spec=structlog.stdlib.BoundLogger)


class TestConnectionProbe:
    """Tests for ConnectionProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        """Default probe should work without explicit logger."""
        probe = DefaultConnectionProbe()
        assert probe._logger is not None

    def test_engine_created_logs_info(self):
        logger = mock_logger()
        probe = DefaultConnectionProbe(logger=logger)

        probe.engine_created(host="localhost", database="gateway", pool_size=10)

        logger.info.assert_called_once_with(
            "database_engine_created",
            host="localhost",
            database="gateway",
            pool_size=10,
        )


class TestStartupProbe:
    """Tests for StartupProbe."""

    def test_startup_failure_logs_critical(self):
        logger = mock_logger()
        probe = DefaultStartupProbe(logger=logger)

        probe.application_startup_failed(error=ValueError("no key"))

        logger.critical.assert_called_once_with(
            "application_startup_failed",
            error="no key",
            error_type="ValueError",
        )

    def test_ready_logs_signing_mode(self):
        logger = mock_logger()
        probe = DefaultStartupProbe(logger=logger)

        probe.application_ready(signing_mode="certificate")

        logger.info.assert_called_once_with(
            "application_ready", signing_mode="certificate"
        )


class TestTenantIsolationProbe:
    """Tests for TenantIsolationProbe."""

    def test_rejection_logs_warning_with_context(self):
        logger = mock_logger()
        context = ObservationContext(request_id="req-1")
        probe = DefaultTenantIsolationProbe(logger=logger).with_context(context)

        probe.cross_tenant_write_rejected(
            entity="UserModel", bound_tenant_id="a", row_tenant_id="b"
        )

        logger.warning.assert_called_once_with(
            "cross_tenant_write_rejected",
            entity="UserModel",
            bound_tenant_id="a",
            row_tenant_id="b",
            request_id="req-1",
        )


class TestTenantResolutionProbe:
    """Tests for TenantResolutionProbe."""

    def test_resolution_logs_source(self):
        logger = mock_logger()
        probe = DefaultTenantResolutionProbe(logger=logger)

        probe.tenant_resolved(tenant="acme", source="header")

        logger.debug.assert_called_once_with(
            "tenant_resolved", tenant="acme", source="header"
        )


class TestAuthServiceProbe:
    """Tests for AuthServiceProbe."""

    def test_login_success_does_not_clash_with_context_tenant(self):
        """Principal fields use their own keys next to the context's tenant_id."""
        logger = mock_logger()
        context = ObservationContext(tenant_id="ctx-tenant")
        probe = DefaultAuthServiceProbe(logger=logger).with_context(context)

        probe.login_succeeded(user_id="u1", tenant_id="t1")

        logger.info.assert_called_once_with(
            "login_succeeded",
            principal_id="u1",
            principal_tenant_id="t1",
            tenant_id="ctx-tenant",
        )

    def test_login_failure_logs_warning(self):
        logger = mock_logger()
        probe = DefaultAuthServiceProbe(logger=logger)

        probe.login_failed(state="rejected", reason="bad_password")

        logger.warning.assert_called_once_with(
            "login_failed", state="rejected", reason="bad_password"
        )

    def test_password_change_failure_logs_warning(self):
        logger = mock_logger()
        probe = DefaultAuthServiceProbe(logger=logger)

        probe.password_change_failed(reason="bad_password")

        logger.warning.assert_called_once_with(
            "password_change_failed", reason="bad_password"
        )


class TestTenantServiceProbe:
    """Tests for TenantServiceProbe."""

    def test_tenant_created(self):
        logger = mock_logger()
        probe = DefaultTenantServiceProbe(logger=logger)

        probe.tenant_created(tenant_id="t1", identifier="acme")

        logger.info.assert_called_once_with(
            "tenant_created", created_tenant_id="t1", identifier="acme"
        )


class TestUserServiceProbe:
    """Tests for UserServiceProbe."""

    def test_lockout_logs_warning_with_end(self):
        logger = mock_logger()
        probe = DefaultUserServiceProbe(logger=logger)

        probe.user_locked_out(
            user_id="u1", until=datetime(2026, 1, 15, 12, 30, tzinfo=UTC)
        )

        logger.warning.assert_called_once_with(
            "user_locked_out",
            principal_id="u1",
            lockout_end="2026-01-15T12:30:00+00:00",
        )

    def test_deleted_carries_context(self):
        logger = mock_logger()
        context = ObservationContext(tenant_id="t1")
        probe = DefaultUserServiceProbe(logger=logger).with_context(context)

        probe.user_deleted(user_id="u1")

        logger.info.assert_called_once_with(
            "user_deleted", principal_id="u1", tenant_id="t1"
        )


class TestAuthenticationProbe:
    """Tests for AuthenticationProbe."""

    def test_authenticated_request_records_tenant(self):
        logger = mock_logger()
        probe = DefaultAuthenticationProbe(logger=logger).with_context(
            ObservationContext(request_id="req-1")
        )

        probe.user_authenticated(user_id="u1", tenant_id="t1", username="ada")

        logger.debug.assert_called_once_with(
            "request_authenticated",
            principal_id="u1",
            principal_tenant_id="t1",
            username="ada",
            request_id="req-1",
        )

    def test_rejected_token_records_reason_only(self):
        logger = mock_logger()
        probe = DefaultAuthenticationProbe(logger=logger)

        probe.authentication_failed(reason="expired")

        logger.info.assert_called_once_with("bearer_token_rejected", reason="expired")
