"""bcrypt-backed implementation of ICredentialVerifier.

Hashing runs in a worker thread so that bcrypt's deliberate slowness
does not stall the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from iam.application.security import (
    dummy_password_hash,
    hash_password,
    verify_password,
)
from iam.domain.aggregates import User
from iam.ports.credentials import CredentialCheckOutcome, ICredentialVerifier


def _utc_now() -> datetime:
    return datetime.now(UTC)


class BcryptCredentialVerifier(ICredentialVerifier):
    """Checks passwords and applies the account lockout policy.

    After ``max_failed_attempts`` consecutive failures the account is
    locked for ``lockout_duration``. A locked account reports LOCKED
    without the password being checked.
    """

    def __init__(
        self,
        max_failed_attempts: int = 5,
        lockout_duration: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._max_failed_attempts = max_failed_attempts
        self._lockout_duration = lockout_duration
        self._clock = clock

    async def hash_password(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password)

    async def check(self, user: User, password: str) -> CredentialCheckOutcome:
        now = self._clock()
        if user.is_locked_out(now):
            return CredentialCheckOutcome.LOCKED

        matches = await asyncio.to_thread(
            verify_password, password, user.password_hash
        )
        if not matches:
            locked = user.record_failed_access(
                self._max_failed_attempts, self._lockout_duration, now
            )
            return (
                CredentialCheckOutcome.LOCKED
                if locked
                else CredentialCheckOutcome.FAILED
            )

        user.reset_failed_access()
        if user.two_factor_enabled:
            return CredentialCheckOutcome.TWO_FACTOR_REQUIRED
        return CredentialCheckOutcome.OK

    async def verify(self, user: User, password: str) -> bool:
        """Check a password without touching failure counters or lockout."""
        return await asyncio.to_thread(verify_password, password, user.password_hash)

    async def check_unknown_principal(self, password: str) -> CredentialCheckOutcome:
        """Spend the cost of a password check for a principal that was not found.

        Always reports FAILED.
        """
        await asyncio.to_thread(verify_password, password, dummy_password_hash())
        return CredentialCheckOutcome.FAILED
