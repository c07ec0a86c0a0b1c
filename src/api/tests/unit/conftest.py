"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.auth import (
    SigningKeyProvider,
    TokenIssuer,
    TokenValidator,
)
from tests.unit.support import (
    TEST_AUDIENCE,
    TEST_ISSUER,
    TEST_SECRET,
    FrozenClock,
)


@pytest.fixture
def clock() -> FrozenClock:
    """Provide a frozen clock set to a fixed instant."""
    return FrozenClock()


@pytest.fixture
def symmetric_keys() -> SigningKeyProvider:
    """Provide a symmetric signing key provider."""
    return SigningKeyProvider.symmetric(TEST_SECRET)


@pytest.fixture
def token_issuer(symmetric_keys: SigningKeyProvider, clock: FrozenClock) -> TokenIssuer:
    """Provide a token issuer signing with the symmetric test key."""
    return TokenIssuer(
        symmetric_keys,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        clock=clock,
    )


@pytest.fixture
def token_validator(
    symmetric_keys: SigningKeyProvider, clock: FrozenClock
) -> TokenValidator:
    """Provide a token validator sharing the issuer's key and clock."""
    return TokenValidator(
        symmetric_keys,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        clock=clock,
    )


@pytest.fixture
def mock_session():
    """Provide a mock async session with transaction support."""
    session = Mock(spec=AsyncSession)
    session.info = {}
    session.execute = AsyncMock()
    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=False)
    session.begin = Mock(return_value=ctx_manager)
    return session
