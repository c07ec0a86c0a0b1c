"""PostgreSQL implementation of IRoleRepository.

Roles and role grants are tenant-scoped. Grants are stored in the
``user_roles`` table and stamped with the bound tenant on insert.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Role, User
from iam.domain.value_objects import RoleId, TenantId, UserId, normalize
from iam.infrastructure.models import RoleModel, UserModel, UserRoleModel
from iam.infrastructure.observability import (
    DefaultRoleRepositoryProbe,
    RoleRepositoryProbe,
)
from iam.infrastructure.user_repository import _to_domain as _user_to_domain
from iam.ports.exceptions import DuplicateRoleNameError
from iam.ports.repositories import IRoleRepository


def _to_domain(model: RoleModel) -> Role:
    return Role(
        id=RoleId(value=model.id),
        tenant_id=TenantId(value=model.tenant_id),
        name=model.name,
        description=model.description,
        created_at=model.created_at,
    )


class RoleRepository(IRoleRepository):
    """PostgreSQL-backed repository for Role aggregates and grants."""

    def __init__(
        self, session: AsyncSession, probe: RoleRepositoryProbe | None = None
    ) -> None:
        self._session = session
        self._probe = probe or DefaultRoleRepositoryProbe()

    async def save(self, role: Role) -> None:
        """Persist a role.

        Raises:
            DuplicateRoleNameError: If the name is taken in the tenant
        """
        existing = await self.get_by_name(role.name)
        if existing is not None and existing.id != role.id:
            self._probe.duplicate_role_name(role.name, role.tenant_id.value)
            raise DuplicateRoleNameError(f"Role '{role.name}' already exists")

        stmt = select(RoleModel).where(RoleModel.id == role.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = RoleModel(
                id=role.id.value,
                tenant_id=role.tenant_id.value,
                created_at=role.created_at,
            )
            self._session.add(model)

        model.name = role.name
        model.normalized_name = role.normalized_name
        model.description = role.description

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "uq_roles_tenant_normalized_name" in str(e):
                self._probe.duplicate_role_name(role.name, role.tenant_id.value)
                raise DuplicateRoleNameError(
                    f"Role '{role.name}' already exists"
                ) from e
            raise

        self._probe.role_saved(role.id.value, role.tenant_id.value)

    async def get_by_id(self, role_id: RoleId) -> Role | None:
        stmt = select(RoleModel).where(RoleModel.id == role_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(RoleModel).where(RoleModel.normalized_name == normalize(name))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    async def list_all(self) -> list[Role]:
        stmt = select(RoleModel).order_by(RoleModel.normalized_name)
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def delete(self, role: Role) -> bool:
        """Delete a role together with its grants.

        Returns:
            True if deleted, False if not found
        """
        stmt = select(RoleModel).where(RoleModel.id == role.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.execute(
            delete(UserRoleModel).where(UserRoleModel.role_id == role.id.value)
        )
        await self._session.delete(model)
        await self._session.flush()

        self._probe.role_deleted(role.id.value)
        return True

    async def role_names_for_user(self, user_id: UserId) -> list[str]:
        stmt = (
            select(RoleModel.name)
            .join(UserRoleModel, UserRoleModel.role_id == RoleModel.id)
            .where(UserRoleModel.user_id == user_id.value)
            .order_by(RoleModel.normalized_name)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add_user(self, role: Role, user_id: UserId) -> bool:
        """Grant a role to a user.

        Returns:
            True if granted, False if the user already had it
        """
        stmt = select(UserRoleModel).where(
            UserRoleModel.role_id == role.id.value,
            UserRoleModel.user_id == user_id.value,
        )
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return False

        self._session.add(
            UserRoleModel(
                user_id=user_id.value,
                role_id=role.id.value,
                tenant_id=role.tenant_id.value,
            )
        )
        await self._session.flush()
        self._probe.role_granted(role.id.value, user_id.value)
        return True

    async def remove_user(self, role: Role, user_id: UserId) -> bool:
        """Revoke a role from a user.

        Returns:
            True if revoked, False if the user did not have it
        """
        stmt = select(UserRoleModel).where(
            UserRoleModel.role_id == role.id.value,
            UserRoleModel.user_id == user_id.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.role_revoked(role.id.value, user_id.value)
        return True

    async def list_users(self, role: Role) -> list[User]:
        stmt = (
            select(UserModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.id)
            .where(UserRoleModel.role_id == role.id.value)
            .order_by(UserModel.normalized_email)
        )
        result = await self._session.execute(stmt)
        return [_user_to_domain(model) for model in result.scalars().all()]
