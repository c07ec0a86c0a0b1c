"""Refresh token record for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from iam.domain.value_objects import TenantId, UserId


@dataclass(frozen=True)
class RefreshToken:
    """The single active refresh token of a principal.

    Only the digest of the opaque token is kept. Storing a new record for
    a principal supersedes the previous one.
    """

    user_id: UserId
    tenant_id: TenantId
    token_hash: str
    expires_at: datetime
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(UTC))
