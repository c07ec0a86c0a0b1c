"""Unit tests for the application entry point and its lifespan."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from infrastructure.settings import get_jwt_settings
from shared_kernel.auth import (
    SecurityContext,
    SigningKeyMisconfiguredError,
    SigningMode,
    TokenSubject,
)
from tests.unit.support import TEST_SECRET


@pytest.fixture
def jwt_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch, None, None]:
    """Isolate JWT settings from the process environment."""
    monkeypatch.delenv("GATEWAY_JWT_USE_RSA_CERTIFICATE", raising=False)
    monkeypatch.setenv("GATEWAY_JWT_SECRET_KEY", TEST_SECRET)
    get_jwt_settings.cache_clear()
    yield monkeypatch
    get_jwt_settings.cache_clear()


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self):
        from main import app

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestLifespan:
    """Tests for gateway_lifespan."""

    @pytest.mark.asyncio
    async def test_builds_security_context(self, jwt_env):
        from main import gateway_lifespan

        app = FastAPI()

        async with gateway_lifespan(app):
            security = app.state.security

        assert isinstance(security, SecurityContext)
        assert security.key_provider.mode is SigningMode.SYMMETRIC

    @pytest.mark.asyncio
    async def test_short_secret_aborts_startup(self, jwt_env):
        from main import gateway_lifespan

        jwt_env.setenv("GATEWAY_JWT_SECRET_KEY", "too-short")
        get_jwt_settings.cache_clear()
        app = FastAPI()

        with pytest.raises(SigningKeyMisconfiguredError):
            async with gateway_lifespan(app):
                pass

        assert not hasattr(app.state, "security")

    @pytest.mark.asyncio
    async def test_missing_certificate_aborts_startup(self, jwt_env, tmp_path):
        from main import gateway_lifespan

        jwt_env.setenv("GATEWAY_JWT_USE_RSA_CERTIFICATE", "true")
        jwt_env.setenv("GATEWAY_JWT_RSA_PRIVATE_KEY_PATH", str(tmp_path / "none.pfx"))
        get_jwt_settings.cache_clear()

        with pytest.raises(SigningKeyMisconfiguredError):
            async with gateway_lifespan(FastAPI()):
                pass

    def test_application_startup_wires_issuer_and_validator(self, jwt_env):
        from main import app

        subject = TokenSubject(
            user_id="01JCUSER000000000000000000", email="a@x.com", username="a"
        )

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            security: SecurityContext = app.state.security
            token = security.token_issuer.issue_access_token(
                subject, roles=[], tenant_id="01JCACME000000000000000000"
            ).token
            claims = security.token_validator.validate(token)

        assert claims.user_id == subject.user_id
        assert claims.tenant_id == "01JCACME000000000000000000"
