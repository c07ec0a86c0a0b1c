"""Credential verification port for IAM bounded context."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from iam.domain.aggregates import User


class CredentialCheckOutcome(StrEnum):
    """Result of checking a submitted password against a principal."""

    OK = "ok"
    LOCKED = "locked"
    TWO_FACTOR_REQUIRED = "two_factor_required"
    FAILED = "failed"


@runtime_checkable
class ICredentialVerifier(Protocol):
    """Hashes passwords and checks them under the lockout policy.

    ``check`` may update the principal's failure counters and lockout;
    callers persist the principal afterwards.
    """

    async def hash_password(self, password: str) -> str:
        """Hash a password for storage."""
        ...

    async def check(self, user: User, password: str) -> CredentialCheckOutcome:
        """Check a submitted password for a principal."""
        ...

    async def verify(self, user: User, password: str) -> bool:
        """Check a password without touching failure counters or lockout."""
        ...

    async def check_unknown_principal(self, password: str) -> CredentialCheckOutcome:
        """Take as long as ``check`` would, for a principal that was not found."""
        ...
