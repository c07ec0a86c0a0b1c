"""Unit tests for session-level tenant isolation.

Runs the isolation listeners against an in-memory SQLite database using
synchronous ``TenantScopedSession`` objects.
"""

from collections.abc import Generator
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, select, update
from sqlalchemy.orm import Session, sessionmaker

from iam.infrastructure.models import RoleModel, TenantModel, UserModel
from infrastructure.database import (
    CrossTenantAccessError,
    TenantScopedSession,
    bind_tenant,
    bound_tenant,
)
from infrastructure.database.models import Base

ACME = "01JCACME000000000000000000"
OTHER = "01JCOTHER00000000000000000"
ACME_USER = "01JCACMEUSER00000000000000"
OTHER_USER = "01JCOTHERUSER0000000000000"


def make_user(user_id: str, email: str, tenant_id: str | None = None) -> UserModel:
    user = UserModel(
        id=user_id,
        email=email,
        normalized_email=email.upper(),
        username=email,
        normalized_username=email.upper(),
        password_hash="hash",
    )
    if tenant_id is not None:
        user.tenant_id = tenant_id
    return user


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Provide a seeded database with one user in each of two tenants."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    factory = sessionmaker(engine, class_=TenantScopedSession, expire_on_commit=False)

    with factory() as session:
        session.add_all(
            [
                TenantModel(id=ACME, identifier="acme", name="Acme"),
                TenantModel(id=OTHER, identifier="other", name="Other"),
            ]
        )
        session.flush()
        session.add_all(
            [
                make_user(ACME_USER, "a@x.com", ACME),
                make_user(OTHER_USER, "o@x.com", OTHER),
            ]
        )
        session.commit()

    yield factory
    engine.dispose()


class TestBinding:
    """Tests for binding a tenant to a session."""

    def test_unbound_by_default(self, session_factory):
        with session_factory() as session:
            assert bound_tenant(session) is None

    def test_rebinding_same_tenant_is_allowed(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            bind_tenant(session, ACME)

            assert bound_tenant(session) == ACME

    def test_rebinding_other_tenant_fails(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)

            with pytest.raises(ValueError):
                bind_tenant(session, OTHER)


class TestReadFiltering:
    """Tests for query constraint on tenant-scoped models."""

    def test_bound_session_sees_only_its_tenant(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)

            ids = session.scalars(select(UserModel.id)).all()

        assert ids == [ACME_USER]

    def test_explicit_lookup_of_foreign_row_finds_nothing(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)

            found = session.scalars(
                select(UserModel).where(UserModel.id == OTHER_USER)
            ).one_or_none()

        assert found is None

    def test_unbound_session_sees_everything(self, session_factory):
        with session_factory() as session:
            ids = session.scalars(select(UserModel.id)).all()

        assert sorted(ids) == sorted([ACME_USER, OTHER_USER])

    def test_tenants_are_never_filtered(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)

            identifiers = session.scalars(select(TenantModel.identifier)).all()

        assert sorted(identifiers) == ["acme", "other"]

    def test_bulk_update_is_confined(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            session.execute(
                update(UserModel)
                .values(first_name="Renamed")
                .execution_options(synchronize_session=False)
            )
            session.commit()

        with session_factory() as session:
            rows = session.execute(select(UserModel.id, UserModel.first_name))
            names = dict(rows.all())

        assert names == {ACME_USER: "Renamed", OTHER_USER: None}


class TestWriteGuard:
    """Tests for the flush-time guard on tenant-scoped writes."""

    def test_new_rows_are_stamped(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            role = RoleModel(
                id="01JCROLE000000000000000000",
                name="admin",
                normalized_name="ADMIN",
            )
            session.add(role)
            session.flush()

            assert role.tenant_id == ACME

    def test_insert_for_other_tenant_rejected(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            session.add(make_user("01JCNEWUSER000000000000000", "n@x.com", OTHER))

            with pytest.raises(CrossTenantAccessError) as exc_info:
                session.flush()

        assert str(exc_info.value) == "UserModel not found"
        assert exc_info.value.row_tenant_id == OTHER

    def test_update_of_foreign_row_rejected(self, session_factory):
        with session_factory() as session:
            foreign = session.get(UserModel, OTHER_USER)
            bind_tenant(session, ACME)
            foreign.first_name = "Hijacked"

            with pytest.raises(CrossTenantAccessError):
                session.flush()

    def test_delete_of_foreign_row_rejected(self, session_factory):
        with session_factory() as session:
            foreign = session.get(UserModel, OTHER_USER)
            bind_tenant(session, ACME)
            session.delete(foreign)

            with pytest.raises(CrossTenantAccessError):
                session.flush()

    def test_moving_own_row_to_other_tenant_rejected(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            own = session.scalars(select(UserModel)).one()
            own.tenant_id = OTHER

            with pytest.raises(CrossTenantAccessError):
                session.flush()

    def test_update_of_own_row_allowed(self, session_factory):
        with session_factory() as session:
            bind_tenant(session, ACME)
            own = session.scalars(select(UserModel)).one()
            own.first_name = "Ada"
            session.commit()

        with session_factory() as session:
            assert session.get(UserModel, ACME_USER).first_name == "Ada"

    def test_rejection_is_recorded(self, session_factory):
        with patch(
            "infrastructure.database.tenant_isolation._probe"
        ) as probe, session_factory() as session:
            bind_tenant(session, ACME)
            session.add(make_user("01JCNEWUSER000000000000000", "n@x.com", OTHER))

            with pytest.raises(CrossTenantAccessError):
                session.flush()

        probe.cross_tenant_write_rejected.assert_called_once_with(
            entity="UserModel", bound_tenant_id=ACME, row_tenant_id=OTHER
        )
