"""SQLAlchemy ORM models for roles and role grants.

Both tables are tenant-scoped. Role names are unique per tenant.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantScopedMixin, _utc_now


class RoleModel(Base, TenantScopedMixin):
    """ORM model for roles table."""

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "normalized_name", name="uq_roles_tenant_normalized_name"
        ),
        ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name="fk_roles_tenant_id",
            ondelete="RESTRICT",
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), insert_default=_utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoleModel(id={self.id}, name={self.name})>"


class UserRoleModel(Base, TenantScopedMixin):
    """ORM model for user_roles table (role grants)."""

    __tablename__ = "user_roles"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name="fk_user_roles_tenant_id",
            ondelete="RESTRICT",
        ),
    )

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserRoleModel(user_id={self.user_id}, role_id={self.role_id})>"
