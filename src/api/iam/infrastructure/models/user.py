"""SQLAlchemy ORM model for the users table.

Stores principals and their credential state. Rows are tenant-scoped:
email and username are unique per tenant, not globally.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKeyConstraint,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantScopedMixin, TimestampMixin


class UserModel(Base, TimestampMixin, TenantScopedMixin):
    """ORM model for users table.

    The tenant foreign key uses RESTRICT: a tenant cannot be deleted
    while it still has principals.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "normalized_email", name="uq_users_tenant_normalized_email"
        ),
        UniqueConstraint(
            "tenant_id",
            "normalized_username",
            name="uq_users_tenant_normalized_username",
        ),
        ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name="fk_users_tenant_id",
            ondelete="RESTRICT",
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_email: Mapped[str] = mapped_column(String(256), nullable=False)
    username: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_username: Mapped[str] = mapped_column(String(256), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    two_factor_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    access_failed_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    lockout_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, tenant_id={self.tenant_id})>"
