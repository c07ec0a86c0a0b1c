"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from iam.presentation import router as iam_router
from infrastructure.database.dependencies import close_database_connections
from infrastructure.exception_handlers import register_exception_handlers
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_jwt_settings,
    get_settings,
    get_tenant_resolution_settings,
)
from infrastructure.version import __version__
from shared_kernel.auth import SigningKeyMisconfiguredError, build_security_context


@asynccontextmanager
async def gateway_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Security context (signing keys, token issuer and validator); an
      unusable key configuration aborts startup
    - Database engine disposal on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    probe = DefaultStartupProbe()
    probe.application_starting(app_name=settings.app_name, version=__version__)

    try:
        security = build_security_context(
            get_jwt_settings(), get_tenant_resolution_settings()
        )
    except SigningKeyMisconfiguredError as e:
        probe.application_startup_failed(error=e)
        raise

    app.state.security = security
    probe.application_ready(signing_mode=security.key_provider.mode.value)

    yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title=get_settings().app_name,
    description="Multi-tenant identity and token gateway",
    version=__version__,
    lifespan=gateway_lifespan,
)

register_exception_handlers(app, debug=get_settings().debug)

# Include IAM bounded context routes
app.include_router(iam_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
