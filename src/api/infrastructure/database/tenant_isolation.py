"""Tenant isolation enforced at the ORM session level.

Sessions of class ``TenantScopedSession`` carry the resolved tenant in
``session.info``. While a tenant is bound:

- ORM SELECT, UPDATE and DELETE statements touching a
  ``TenantScopedMixin`` model are constrained to that tenant
- new tenant-scoped objects without a tenant are stamped with it
- flushing a new, changed or deleted object owned by another tenant
  raises ``CrossTenantAccessError``

Without a bound tenant nothing is filtered or stamped. Only seeding and
migrations run that way; request handlers always bind before touching
tenant-scoped data.
"""

from __future__ import annotations

from typing import Any, NoReturn

from sqlalchemy import event, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from infrastructure.database.exceptions import CrossTenantAccessError
from infrastructure.database.models import TenantScopedMixin
from infrastructure.observability.probes import DefaultTenantIsolationProbe

TENANT_INFO_KEY = "tenant_id"

_probe = DefaultTenantIsolationProbe()


class TenantScopedSession(Session):
    """Session whose ORM activity is confined to the bound tenant.

    Use as ``sync_session_class`` of an ``async_sessionmaker``.
    """


def bind_tenant(session: Session | AsyncSession, tenant_id: str) -> None:
    """Bind a tenant to a session for the rest of its lifetime.

    Raises:
        ValueError: If a different tenant is already bound.
    """
    current = session.info.get(TENANT_INFO_KEY)
    if current is not None and current != tenant_id:
        raise ValueError("Session is already bound to another tenant")
    session.info[TENANT_INFO_KEY] = tenant_id


def bound_tenant(session: Session | AsyncSession) -> str | None:
    """Get the tenant bound to a session, if any."""
    return session.info.get(TENANT_INFO_KEY)


def ensure_tenant_write(
    session: Session | AsyncSession, entity: str, tenant_id: str
) -> None:
    """Check a row written by a bulk INSERT statement against the bound tenant.

    Bulk inserts skip the flush, so ``before_flush`` never sees them.

    Raises:
        CrossTenantAccessError: If a different tenant is bound.
    """
    bound = session.info.get(TENANT_INFO_KEY)
    if bound is not None and bound != tenant_id:
        _reject_entity(entity, bound, tenant_id)


def _committed_tenant(obj: TenantScopedMixin) -> Any:
    history = inspect(obj).attrs.tenant_id.history
    if history.deleted:
        return history.deleted[0]
    return obj.tenant_id


@event.listens_for(TenantScopedSession, "do_orm_execute")
def _constrain_to_tenant(execute_state: ORMExecuteState) -> None:
    tenant_id = execute_state.session.info.get(TENANT_INFO_KEY)
    if tenant_id is None:
        return
    if execute_state.is_column_load or execute_state.is_relationship_load:
        return
    if not (
        execute_state.is_select
        or execute_state.is_update
        or execute_state.is_delete
    ):
        return

    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            TenantScopedMixin,
            lambda cls: cls.tenant_id == tenant_id,
            include_aliases=True,
        )
    )


@event.listens_for(TenantScopedSession, "before_flush")
def _guard_tenant_writes(
    session: Session, flush_context: Any, instances: Any
) -> None:
    tenant_id = session.info.get(TENANT_INFO_KEY)
    if tenant_id is None:
        return

    for obj in session.new:
        if not isinstance(obj, TenantScopedMixin):
            continue
        if obj.tenant_id is None:
            obj.tenant_id = tenant_id
        elif obj.tenant_id != tenant_id:
            _reject(obj, tenant_id, obj.tenant_id)

    for obj in [*session.dirty, *session.deleted]:
        if not isinstance(obj, TenantScopedMixin):
            continue
        owner = _committed_tenant(obj)
        if owner != tenant_id or obj.tenant_id != owner:
            _reject(obj, tenant_id, owner)


def _reject(
    obj: object, bound_tenant_id: str, row_tenant_id: str | None
) -> NoReturn:
    _reject_entity(type(obj).__name__, bound_tenant_id, row_tenant_id)


def _reject_entity(
    entity: str, bound_tenant_id: str, row_tenant_id: str | None
) -> NoReturn:
    _probe.cross_tenant_write_rejected(
        entity=entity,
        bound_tenant_id=bound_tenant_id,
        row_tenant_id=row_tenant_id,
    )
    raise CrossTenantAccessError(entity, bound_tenant_id, row_tenant_id)
