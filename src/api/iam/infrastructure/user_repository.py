"""PostgreSQL implementation of IUserRepository.

Users are tenant-scoped: on a tenant-bound session every lookup here
only ever sees principals of the bound tenant.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId, normalize
from iam.infrastructure.models import RefreshTokenModel, UserModel, UserRoleModel
from iam.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from iam.ports.exceptions import DuplicateUserError
from iam.ports.repositories import IUserRepository


def _to_domain(model: UserModel) -> User:
    return User(
        id=UserId(value=model.id),
        tenant_id=TenantId(value=model.tenant_id),
        email=model.email,
        username=model.username,
        password_hash=model.password_hash,
        first_name=model.first_name,
        last_name=model.last_name,
        is_active=model.is_active,
        two_factor_enabled=model.two_factor_enabled,
        access_failed_count=model.access_failed_count,
        lockout_end=model.lockout_end,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _email_taken(user: User) -> str:
    return f"Email '{user.email}' is already registered."


def _username_taken(user: User) -> str:
    return f"Username '{user.username}' is already taken."


class UserRepository(IUserRepository):
    """PostgreSQL-backed repository for User aggregates."""

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one. The owning tenant
        of an existing user is never changed.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserError: If the email or username is taken in the tenant
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            existing = await self.get_by_email(user.email)
            if existing is not None and existing.id != user.id:
                self._probe.duplicate_user(user.tenant_id.value)
                raise DuplicateUserError(_email_taken(user))
            existing = await self.get_by_username(user.username)
            if existing is not None and existing.id != user.id:
                self._probe.duplicate_user(user.tenant_id.value)
                raise DuplicateUserError(_username_taken(user))
            model = UserModel(id=user.id.value, tenant_id=user.tenant_id.value)
            self._session.add(model)

        model.email = user.email
        model.normalized_email = user.normalized_email
        model.username = user.username
        model.normalized_username = user.normalized_username
        model.password_hash = user.password_hash
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.is_active = user.is_active
        model.two_factor_enabled = user.two_factor_enabled
        model.access_failed_count = user.access_failed_count
        model.lockout_end = user.lockout_end

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "uq_users_tenant_normalized_email" in str(e):
                self._probe.duplicate_user(user.tenant_id.value)
                raise DuplicateUserError(_email_taken(user)) from e
            if "uq_users_tenant_normalized_username" in str(e):
                self._probe.duplicate_user(user.tenant_id.value)
                raise DuplicateUserError(_username_taken(user)) from e
            raise

        self._probe.user_saved(user.id.value, model.tenant_id)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return _to_domain(model)

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email, compared in normalized form."""
        stmt = select(UserModel).where(
            UserModel.normalized_email == normalize(email)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.user_retrieved(model.id)
        return _to_domain(model)

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by username, compared in normalized form."""
        stmt = select(UserModel).where(
            UserModel.normalized_username == normalize(username)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.user_retrieved(model.id)
        return _to_domain(model)

    async def list_all(self) -> list[User]:
        """List users, ordered by normalized email."""
        stmt = select(UserModel).order_by(UserModel.normalized_email)
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def delete(self, user: User) -> bool:
        """Delete a user together with their role grants and refresh token.

        Returns:
            True if deleted, False if not found
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.execute(
            delete(UserRoleModel).where(UserRoleModel.user_id == user.id.value)
        )
        await self._session.execute(
            delete(RefreshTokenModel).where(
                RefreshTokenModel.user_id == user.id.value
            )
        )
        await self._session.delete(model)
        await self._session.flush()

        self._probe.user_deleted(user.id.value)
        return True
