"""Integration tests for the identity repositories against PostgreSQL.

Covers per-tenant uniqueness, session-level tenant isolation and the
single refresh token per principal.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iam.domain.aggregates import RefreshToken, Role, Tenant, User
from iam.infrastructure.refresh_token_repository import RefreshTokenRepository
from iam.infrastructure.role_repository import RoleRepository
from iam.infrastructure.tenant_repository import TenantRepository
from iam.infrastructure.user_repository import UserRepository
from iam.ports.exceptions import DuplicateTenantIdentifierError, DuplicateUserError
from infrastructure.database import CrossTenantAccessError, bind_tenant

pytestmark = pytest.mark.integration


async def _create_tenant(
    factory: async_sessionmaker[AsyncSession], identifier: str
) -> Tenant:
    tenant = Tenant.create(identifier=identifier, name=identifier.title())
    async with factory() as session, session.begin():
        await TenantRepository(session).save(tenant)
    return tenant


async def _create_user(
    factory: async_sessionmaker[AsyncSession], tenant: Tenant, email: str
) -> User:
    user = User.create(tenant_id=tenant.id, email=email, password_hash="hash")
    async with factory() as session, session.begin():
        bind_tenant(session, tenant.id.value)
        await UserRepository(session).save(user)
    return user


class TestTenantRepository:
    """Tests for the tenant registry."""

    @pytest.mark.asyncio
    async def test_round_trip_by_identifier(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")

        async with session_factory() as session:
            found = await TenantRepository(session).get_by_identifier("acme")

        assert found is not None
        assert found.id == acme.id
        assert found.is_active

    @pytest.mark.asyncio
    async def test_identifier_is_globally_unique(self, session_factory):
        await _create_tenant(session_factory, "acme")

        with pytest.raises(DuplicateTenantIdentifierError):
            await _create_tenant(session_factory, "acme")

    @pytest.mark.asyncio
    async def test_count_users(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        await _create_user(session_factory, acme, "a@x.com")
        await _create_user(session_factory, acme, "b@x.com")

        async with session_factory() as session:
            assert await TenantRepository(session).count_users(acme.id) == 2


class TestUserIsolation:
    """Tests for users across tenants."""

    @pytest.mark.asyncio
    async def test_same_email_in_two_tenants(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        other = await _create_tenant(session_factory, "other")

        first = await _create_user(session_factory, acme, "ada@x.com")
        second = await _create_user(session_factory, other, "ada@x.com")

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_duplicate_email_in_one_tenant(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        await _create_user(session_factory, acme, "ada@x.com")

        with pytest.raises(DuplicateUserError):
            await _create_user(session_factory, acme, "ADA@x.com")

    @pytest.mark.asyncio
    async def test_bound_session_cannot_see_other_tenant(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        other = await _create_tenant(session_factory, "other")
        foreign = await _create_user(session_factory, other, "ada@x.com")

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)
            repo = UserRepository(session)

            assert await repo.get_by_id(foreign.id) is None
            assert await repo.get_by_email("ada@x.com") is None

    @pytest.mark.asyncio
    async def test_bound_session_cannot_write_other_tenant(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        other = await _create_tenant(session_factory, "other")
        intruder = User.create(tenant_id=other.id, email="i@x.com", password_hash="x")

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)

            with pytest.raises(CrossTenantAccessError):
                async with session.begin():
                    await UserRepository(session).save(intruder)

        async with session_factory() as session:
            assert await UserRepository(session).get_by_id(intruder.id) is None


class TestRoleRepository:
    """Tests for roles and grants."""

    @pytest.mark.asyncio
    async def test_grants(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        user = await _create_user(session_factory, acme, "ada@x.com")

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            repo = RoleRepository(session)
            admin = Role.create(tenant_id=acme.id, name="admin")
            viewer = Role.create(tenant_id=acme.id, name="viewer")
            await repo.save(admin)
            await repo.save(viewer)

            assert await repo.add_user(admin, user.id) is True
            assert await repo.add_user(admin, user.id) is False
            await repo.add_user(viewer, user.id)

            assert await repo.role_names_for_user(user.id) == ["admin", "viewer"]
            assert await repo.list_users(admin) == [user]

            assert await repo.delete(admin) is True
            assert await repo.role_names_for_user(user.id) == ["viewer"]

    @pytest.mark.asyncio
    async def test_roles_are_invisible_to_other_tenants(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        other = await _create_tenant(session_factory, "other")

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            admin = Role.create(tenant_id=acme.id, name="admin")
            await RoleRepository(session).save(admin)

        async with session_factory() as session:
            bind_tenant(session, other.id.value)
            repo = RoleRepository(session)

            assert await repo.list_all() == []
            assert await repo.get_by_name("admin") is None


class TestRefreshTokenRepository:
    """Tests for refresh token storage."""

    @pytest.mark.asyncio
    async def test_store_replaces_previous_token(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        user = await _create_user(session_factory, acme, "ada@x.com")
        expires_at = datetime.now(UTC) + timedelta(days=7)

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            repo = RefreshTokenRepository(session)
            for digest in ("first", "second"):
                await repo.store(
                    RefreshToken(
                        user_id=user.id,
                        tenant_id=acme.id,
                        token_hash=digest,
                        expires_at=expires_at,
                    )
                )

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)
            repo = RefreshTokenRepository(session)

            assert await repo.get_by_token_hash("first") is None
            stored = await repo.get_by_token_hash("second")

        assert stored is not None
        assert stored.user_id == user.id

    @pytest.mark.asyncio
    async def test_revoke(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        user = await _create_user(session_factory, acme, "ada@x.com")

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            repo = RefreshTokenRepository(session)
            await repo.store(
                RefreshToken(
                    user_id=user.id,
                    tenant_id=acme.id,
                    token_hash="digest",
                    expires_at=datetime.now(UTC) + timedelta(days=1),
                )
            )

            assert await repo.revoke(user.id) is True
            assert await repo.revoke(user.id) is False

    @pytest.mark.asyncio
    async def test_concurrent_store_last_writer_wins(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        user = await _create_user(session_factory, acme, "ada@x.com")
        expires_at = datetime.now(UTC) + timedelta(days=7)

        async def store(digest: str) -> None:
            async with session_factory() as session, session.begin():
                bind_tenant(session, acme.id.value)
                await RefreshTokenRepository(session).store(
                    RefreshToken(
                        user_id=user.id,
                        tenant_id=acme.id,
                        token_hash=digest,
                        expires_at=expires_at,
                    )
                )

        await asyncio.gather(store("first"), store("second"))

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)
            repo = RefreshTokenRepository(session)
            found = [
                await repo.get_by_token_hash(digest) for digest in ("first", "second")
            ]

        assert sum(token is not None for token in found) == 1


class TestUserAdministration:
    """Tests for username conflicts, listing and deleting users."""

    @pytest.mark.asyncio
    async def test_username_conflict_is_reported_as_such(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        first = User.create(
            tenant_id=acme.id, email="a@x.com", password_hash="x", username="ada"
        )
        second = User.create(
            tenant_id=acme.id, email="b@x.com", password_hash="x", username="ADA"
        )
        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            await UserRepository(session).save(first)

        with pytest.raises(DuplicateUserError, match="Username 'ADA'"):
            async with session_factory() as session, session.begin():
                bind_tenant(session, acme.id.value)
                await UserRepository(session).save(second)

    @pytest.mark.asyncio
    async def test_list_all_is_tenant_scoped(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        other = await _create_tenant(session_factory, "other")
        mine = await _create_user(session_factory, acme, "ada@x.com")
        await _create_user(session_factory, other, "ada@x.com")

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)
            users = await UserRepository(session).list_all()

        assert [u.id for u in users] == [mine.id]

    @pytest.mark.asyncio
    async def test_delete_removes_grants_and_refresh_token(self, session_factory):
        acme = await _create_tenant(session_factory, "acme")
        user = await _create_user(session_factory, acme, "ada@x.com")

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            admin = Role.create(tenant_id=acme.id, name="admin")
            roles = RoleRepository(session)
            await roles.save(admin)
            await roles.add_user(admin, user.id)
            await RefreshTokenRepository(session).store(
                RefreshToken(
                    user_id=user.id,
                    tenant_id=acme.id,
                    token_hash="digest",
                    expires_at=datetime.now(UTC) + timedelta(days=1),
                )
            )

        async with session_factory() as session, session.begin():
            bind_tenant(session, acme.id.value)
            assert await UserRepository(session).delete(user) is True

        async with session_factory() as session:
            bind_tenant(session, acme.id.value)
            assert await UserRepository(session).get_by_id(user.id) is None
            assert await RoleRepository(session).list_users(admin) == []
            token = await RefreshTokenRepository(session).get_by_token_hash("digest")
            assert token is None
            assert await TenantRepository(session).count_users(acme.id) == 0
