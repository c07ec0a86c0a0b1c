"""Unit tests for UserService."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from iam.application.observability import UserServiceProbe
from iam.application.services import UserService
from iam.application.services.user_service import INDEFINITE_LOCKOUT_END
from iam.domain.aggregates import RefreshToken, Role, Tenant, User
from iam.domain.value_objects import UserId
from infrastructure.database import bind_tenant
from tests.unit.iam.fakes import (
    FakeSession,
    InMemoryRoleRepository,
    InMemoryStore,
    InMemoryUserRepository,
)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def acme(store) -> Tenant:
    tenant = Tenant.create(identifier="acme", name="Acme")
    store.tenants[tenant.id.value] = tenant
    return tenant


@pytest.fixture
def other(store) -> Tenant:
    tenant = Tenant.create(identifier="other", name="Other")
    store.tenants[tenant.id.value] = tenant
    return tenant


def _add_user(store: InMemoryStore, tenant: Tenant, email: str) -> User:
    user = User.create(tenant_id=tenant.id, email=email, password_hash="x")
    store.users[user.id.value] = user
    return user


@pytest.fixture
def user(store, acme) -> User:
    return _add_user(store, acme, "user@x.com")


@pytest.fixture
def foreign_user(store, other) -> User:
    return _add_user(store, other, "user@x.com")


@pytest.fixture
def mock_probe():
    return Mock(spec=UserServiceProbe)


@pytest.fixture
def user_service(store, acme, mock_probe, clock):
    session = FakeSession()
    bind_tenant(session, acme.id.value)
    return UserService(
        user_repository=InMemoryUserRepository(store, session),
        role_repository=InMemoryRoleRepository(store, session),
        session=session,
        probe=mock_probe,
        clock=clock,
    )


class TestQueries:
    """Tests for listing and fetching users."""

    @pytest.mark.asyncio
    async def test_list_only_sees_own_tenant(
        self, user_service, store, acme, user, foreign_user
    ):
        second = _add_user(store, acme, "a@x.com")

        users = await user_service.list_users()

        assert users == [second, user]

    @pytest.mark.asyncio
    async def test_get_includes_roles(self, user_service, store, acme, user):
        role = Role.create(tenant_id=acme.id, name="admin")
        store.roles[role.id.value] = role
        store.grants.add((role.id.value, user.id.value))

        view = await user_service.get_user(user.id)

        assert view.id == user.id.value
        assert view.roles == ("admin",)

    @pytest.mark.asyncio
    async def test_get_user_of_other_tenant(self, user_service, foreign_user):
        assert await user_service.get_user(foreign_user.id) is None


class TestActivation:
    """Tests for activating and deactivating users."""

    @pytest.mark.asyncio
    async def test_deactivate_and_activate(self, user_service, store, user, mock_probe):
        assert await user_service.set_active(user.id, False) is True
        assert store.users[user.id.value].is_active is False

        assert await user_service.set_active(user.id, True) is True
        assert store.users[user.id.value].is_active is True

        mock_probe.user_activation_changed.assert_called_with(
            user_id=user.id.value, is_active=True
        )

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service, mock_probe):
        assert await user_service.set_active(UserId.generate(), False) is False
        mock_probe.user_activation_changed.assert_not_called()

    @pytest.mark.asyncio
    async def test_user_of_other_tenant_is_untouched(
        self, user_service, store, foreign_user
    ):
        assert await user_service.set_active(foreign_user.id, False) is False
        assert store.users[foreign_user.id.value].is_active is True


class TestLockout:
    """Tests for administrator lockouts."""

    @pytest.mark.asyncio
    async def test_lock_for_duration(self, user_service, store, user, clock):
        until = await user_service.lock_out(user.id, timedelta(minutes=30))

        assert until == clock.now + timedelta(minutes=30)
        stored = store.users[user.id.value]
        assert stored.lockout_end == until
        assert stored.is_locked_out(clock.now)

    @pytest.mark.asyncio
    async def test_lock_indefinitely(self, user_service, store, user):
        until = await user_service.lock_out(user.id)

        assert until == INDEFINITE_LOCKOUT_END
        assert store.users[user.id.value].lockout_end == INDEFINITE_LOCKOUT_END

    @pytest.mark.asyncio
    async def test_unlock_resets_failures(
        self, user_service, store, user, clock, mock_probe
    ):
        stored = store.users[user.id.value]
        stored.access_failed_count = 3
        stored.lockout_end = clock.now + timedelta(minutes=5)

        assert await user_service.unlock(user.id) is True

        stored = store.users[user.id.value]
        assert stored.lockout_end is None
        assert stored.access_failed_count == 0
        mock_probe.user_unlocked.assert_called_once_with(user_id=user.id.value)

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service):
        assert await user_service.lock_out(UserId.generate()) is None
        assert await user_service.unlock(UserId.generate()) is False


class TestDelete:
    """Tests for deleting users."""

    @pytest.mark.asyncio
    async def test_removes_grants_and_refresh_token(
        self, user_service, store, acme, user, clock, mock_probe
    ):
        role = Role.create(tenant_id=acme.id, name="admin")
        store.roles[role.id.value] = role
        store.grants.add((role.id.value, user.id.value))
        store.refresh_tokens[user.id.value] = RefreshToken(
            user_id=user.id,
            tenant_id=acme.id,
            token_hash="digest",
            expires_at=clock.now + timedelta(days=1),
        )

        assert await user_service.delete_user(user.id) is True

        assert user.id.value not in store.users
        assert store.grants == set()
        assert store.refresh_tokens == {}
        mock_probe.user_deleted.assert_called_once_with(user_id=user.id.value)

    @pytest.mark.asyncio
    async def test_user_of_other_tenant(self, user_service, store, foreign_user):
        assert await user_service.delete_user(foreign_user.id) is False
        assert foreign_user.id.value in store.users
