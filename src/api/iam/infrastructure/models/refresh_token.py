"""SQLAlchemy ORM model for the refresh_tokens table.

Holds at most one refresh token per principal. Only the SHA-256 digest
of the token is stored.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, ForeignKeyConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantScopedMixin, _utc_now


class RefreshTokenModel(Base, TenantScopedMixin):
    """ORM model for refresh_tokens table."""

    __tablename__ = "refresh_tokens"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name="fk_refresh_tokens_tenant_id",
            ondelete="RESTRICT",
        ),
    )

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    token_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), insert_default=_utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RefreshTokenModel(user_id={self.user_id})>"
