"""Unit tests for BcryptCredentialVerifier."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from iam.application.security import (
    dummy_password_hash,
    hash_password,
    verify_password,
)
from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId
from iam.infrastructure import credential_verifier
from iam.infrastructure.credential_verifier import BcryptCredentialVerifier
from iam.ports.credentials import CredentialCheckOutcome, ICredentialVerifier

PASSWORD = "Passw0rd!"


@pytest.fixture(scope="module")
def password_hash() -> str:
    return hash_password(PASSWORD)


@pytest.fixture
def user(password_hash) -> User:
    return User.create(
        tenant_id=TenantId.generate(), email="user@x.com", password_hash=password_hash
    )


@pytest.fixture
def verifier(clock) -> BcryptCredentialVerifier:
    return BcryptCredentialVerifier(
        max_failed_attempts=2, lockout_duration=timedelta(minutes=5), clock=clock
    )


class TestCheck:
    """Tests for BcryptCredentialVerifier.check."""

    def test_satisfies_port(self, verifier):
        assert isinstance(verifier, ICredentialVerifier)

    @pytest.mark.asyncio
    async def test_correct_password(self, verifier, user):
        assert await verifier.check(user, PASSWORD) is CredentialCheckOutcome.OK

    @pytest.mark.asyncio
    async def test_wrong_password_counts_failure(self, verifier, user):
        outcome = await verifier.check(user, "wrong")

        assert outcome is CredentialCheckOutcome.FAILED
        assert user.access_failed_count == 1

    @pytest.mark.asyncio
    async def test_lockout_at_threshold(self, verifier, user, clock):
        await verifier.check(user, "wrong")

        assert await verifier.check(user, "wrong") is CredentialCheckOutcome.LOCKED
        assert user.lockout_end == clock.now + timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_locked_account_rejects_correct_password(self, verifier, user, clock):
        user.lockout_end = clock.now + timedelta(minutes=1)

        assert await verifier.check(user, PASSWORD) is CredentialCheckOutcome.LOCKED

    @pytest.mark.asyncio
    async def test_expired_lockout(self, verifier, user, clock):
        user.lockout_end = clock.now

        assert await verifier.check(user, PASSWORD) is CredentialCheckOutcome.OK
        assert user.lockout_end is None

    @pytest.mark.asyncio
    async def test_two_factor(self, verifier, user):
        user.two_factor_enabled = True

        outcome = await verifier.check(user, PASSWORD)

        assert outcome is CredentialCheckOutcome.TWO_FACTOR_REQUIRED

    @pytest.mark.asyncio
    async def test_hash_password(self, verifier, user):
        hashed = await verifier.hash_password("Other0ne!")

        user.password_hash = hashed
        assert await verifier.check(user, "Other0ne!") is CredentialCheckOutcome.OK


class TestVerify:
    """Tests for checking a password without lockout side effects."""

    @pytest.mark.asyncio
    async def test_matches(self, verifier, user):
        assert await verifier.verify(user, PASSWORD) is True

    @pytest.mark.asyncio
    async def test_mismatch_leaves_counters_alone(self, verifier, user):
        for _ in range(3):
            assert await verifier.verify(user, "wrong") is False

        assert user.access_failed_count == 0
        assert user.lockout_end is None


class TestUnknownPrincipal:
    """Tests for the check run when no principal matched."""

    @pytest.mark.asyncio
    async def test_always_fails(self, verifier):
        outcome = await verifier.check_unknown_principal(PASSWORD)

        assert outcome is CredentialCheckOutcome.FAILED

    @pytest.mark.asyncio
    async def test_runs_bcrypt_against_dummy_hash(self, verifier, monkeypatch):
        spy = Mock(wraps=verify_password)
        monkeypatch.setattr(credential_verifier, "verify_password", spy)

        await verifier.check_unknown_principal(PASSWORD)

        spy.assert_called_once_with(PASSWORD, dummy_password_hash())
        assert dummy_password_hash().startswith("$2")
