"""Database infrastructure - engines, sessions and tenant isolation."""

from infrastructure.database.exceptions import CrossTenantAccessError, DatabaseError
from infrastructure.database.tenant_isolation import (
    TenantScopedSession,
    bind_tenant,
    bound_tenant,
    ensure_tenant_write,
)

__all__ = [
    "CrossTenantAccessError",
    "DatabaseError",
    "TenantScopedSession",
    "bind_tenant",
    "bound_tenant",
    "ensure_tenant_write",
]
