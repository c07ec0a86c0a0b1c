"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Use docker-compose
for testing. The identity tables are created if they do not exist yet.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import iam.infrastructure.models  # noqa: F401 - registers the identity tables
from infrastructure.database.engines import create_sessionmaker, create_write_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings

# Children first so RESTRICT foreign keys never block the cleanup
_IDENTITY_TABLES = ("refresh_tokens", "user_roles", "roles", "users", "tenants")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        GATEWAY_DB_HOST, GATEWAY_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("GATEWAY_DB_HOST", "localhost"),
        port=int(os.getenv("GATEWAY_DB_PORT", "5432")),
        database=os.getenv("GATEWAY_DB_DATABASE", "gateway"),
        username=os.getenv("GATEWAY_DB_USERNAME", "gateway"),
        password=SecretStr(os.getenv("GATEWAY_DB_PASSWORD", "gateway_dev_password")),
    )


@pytest_asyncio.fixture
async def engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine against a schema holding no identity rows."""
    engine = create_write_engine(integration_db_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for table in _IDENTITY_TABLES:
            await conn.execute(text(f"DELETE FROM {table}"))

    yield engine

    async with engine.begin() as conn:
        for table in _IDENTITY_TABLES:
            await conn.execute(text(f"DELETE FROM {table}"))
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Provide a factory for tenant-scoped sessions."""
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an unbound async session for integration tests."""
    async with session_factory() as session:
        yield session
