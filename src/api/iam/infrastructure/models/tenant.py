"""SQLAlchemy ORM model for the tenants table.

Stores tenant metadata in PostgreSQL. Tenants represent organizations
and are the top-level isolation boundary in the system.
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table.

    Tenants are not tenant-scoped: the table is visible from every session.

    Note: Tenant identifiers are globally unique across the entire system.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    identifier: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    connection_override: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    settings: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, identifier={self.identifier})>"
