"""Database-specific exceptions."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class CrossTenantAccessError(DatabaseError):
    """Raised when a write targets a row owned by another tenant.

    Surfaced to callers as not-found so the row's existence is never
    confirmed across tenants.
    """

    def __init__(self, entity: str, bound_tenant_id: str, row_tenant_id: str | None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.bound_tenant_id = bound_tenant_id
        self.row_tenant_id = row_tenant_id
