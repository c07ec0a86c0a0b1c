"""User administration service for IAM bounded context.

All operations act on the tenant the session is bound to; users of other
tenants are reported as not found.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultUserServiceProbe, UserServiceProbe
from iam.application.value_objects import PrincipalView
from iam.domain.aggregates import User
from iam.domain.value_objects import UserId
from iam.ports.repositories import IRoleRepository, IUserRepository

INDEFINITE_LOCKOUT_END = datetime(9999, 12, 31, tzinfo=UTC)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class UserService:
    """Application service for administering a tenant's principals."""

    def __init__(
        self,
        user_repository: IUserRepository,
        role_repository: IRoleRepository,
        session: AsyncSession,
        probe: UserServiceProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize UserService with dependencies.

        Args:
            user_repository: Repository for the tenant's users
            role_repository: Repository for looking up granted roles
            session: Database session bound to the caller's tenant
            probe: Optional domain probe for observability
            clock: Source of the current time, for lockouts
        """
        self._user_repository = user_repository
        self._role_repository = role_repository
        self._session = session
        self._probe = probe or DefaultUserServiceProbe()
        self._clock = clock

    async def list_users(self) -> list[User]:
        return await self._user_repository.list_all()

    async def get_user(self, user_id: UserId) -> PrincipalView | None:
        """Get a user with the roles granted to them."""
        user = await self._user_repository.get_by_id(user_id)
        if user is None:
            return None
        roles = await self._role_repository.role_names_for_user(user.id)
        return PrincipalView.from_user(user, roles)

    async def set_active(self, user_id: UserId, is_active: bool) -> bool:
        """Activate or deactivate a user.

        A deactivated user can neither sign in nor refresh tokens.

        Returns:
            False if the user does not exist
        """
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            if user is None:
                return False
            if is_active:
                user.activate()
            else:
                user.deactivate()
            await self._user_repository.save(user)

        self._probe.user_activation_changed(user_id=user_id.value, is_active=is_active)
        return True

    async def lock_out(
        self, user_id: UserId, duration: timedelta | None = None
    ) -> datetime | None:
        """Lock a user out for ``duration``, or indefinitely when omitted.

        Returns:
            The end of the lockout, or None if the user does not exist
        """
        until = (
            self._clock() + duration if duration is not None else INDEFINITE_LOCKOUT_END
        )
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            if user is None:
                return None
            user.lock_out(until)
            await self._user_repository.save(user)

        self._probe.user_locked_out(user_id=user_id.value, until=until)
        return until

    async def unlock(self, user_id: UserId) -> bool:
        """Lift a lockout and reset the failed attempt count.

        Returns:
            False if the user does not exist
        """
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            if user is None:
                return False
            user.unlock()
            await self._user_repository.save(user)

        self._probe.user_unlocked(user_id=user_id.value)
        return True

    async def delete_user(self, user_id: UserId) -> bool:
        """Delete a user along with their role grants and refresh token.

        Returns:
            False if the user does not exist
        """
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            if user is None:
                return False
            deleted = await self._user_repository.delete(user)

        if deleted:
            self._probe.user_deleted(user_id=user_id.value)
        return deleted
