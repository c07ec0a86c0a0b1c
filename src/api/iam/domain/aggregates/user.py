"""User aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from iam.domain.value_objects import TenantId, UserId, normalize


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False)
class User:
    """User aggregate representing a principal of one tenant.

    Business rules:
    - A user belongs to exactly one tenant, fixed at creation
    - Email and username are unique per tenant, compared in normalized form
    - The password hash is opaque; only the credential verifier reads it
    """

    id: UserId
    tenant_id: TenantId
    email: str
    username: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True
    two_factor_enabled: bool = False
    access_failed_count: int = 0
    lockout_end: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        email: str,
        password_hash: str,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Factory method for registering a new principal.

        The username defaults to the email address.

        Raises:
            ValueError: If the email is empty or malformed
        """
        email = email.strip()
        if not email or "@" not in email:
            raise ValueError("A valid email address is required")

        return cls(
            id=UserId.generate(),
            tenant_id=tenant_id,
            email=email,
            username=(username or "").strip() or email,
            password_hash=password_hash,
            first_name=first_name or None,
            last_name=last_name or None,
        )

    @property
    def normalized_email(self) -> str:
        return normalize(self.email)

    @property
    def normalized_username(self) -> str:
        return normalize(self.username)

    def is_locked_out(self, now: datetime | None = None) -> bool:
        """Whether the account is currently locked out."""
        if self.lockout_end is None:
            return False
        return self.lockout_end > (now or _utc_now())

    def record_failed_access(
        self,
        max_failed_attempts: int,
        lockout_duration: timedelta,
        now: datetime | None = None,
    ) -> bool:
        """Count a failed sign-in, locking the account at the threshold.

        Returns:
            True if this failure locked the account.
        """
        now = now or _utc_now()
        self.access_failed_count += 1
        self.updated_at = now
        if self.access_failed_count >= max_failed_attempts:
            self.lockout_end = now + lockout_duration
            self.access_failed_count = 0
            return True
        return False

    def reset_failed_access(self) -> None:
        self.access_failed_count = 0
        self.lockout_end = None

    def activate(self) -> None:
        """Allow the principal to sign in again."""
        self.is_active = True
        self.updated_at = _utc_now()

    def deactivate(self) -> None:
        """Stop the principal from signing in or refreshing tokens."""
        self.is_active = False
        self.updated_at = _utc_now()

    def lock_out(self, until: datetime) -> None:
        """Lock the account until ``until``, whatever the failure count."""
        self.lockout_end = until
        self.updated_at = _utc_now()

    def unlock(self) -> None:
        """Lift a lockout and forget earlier failed attempts."""
        self.reset_failed_access()
        self.updated_at = _utc_now()

    def change_password(self, password_hash: str) -> None:
        self.password_hash = password_hash
        self.updated_at = _utc_now()

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.username})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)
