"""Role application service for IAM bounded context.

All operations act on the tenant the session is bound to.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultRoleServiceProbe, RoleServiceProbe
from iam.domain.aggregates import Role, User
from iam.domain.value_objects import RoleId, TenantId, UserId
from iam.ports.repositories import IRoleRepository, IUserRepository


class RoleService:
    """Application service for tenant roles and their grants.

    Granted role names are embedded in access tokens issued afterwards;
    tokens already issued keep the roles they were minted with.
    """

    def __init__(
        self,
        role_repository: IRoleRepository,
        user_repository: IUserRepository,
        session: AsyncSession,
        tenant_id: TenantId,
        probe: RoleServiceProbe | None = None,
    ):
        """Initialize RoleService with dependencies.

        Args:
            role_repository: Repository for roles and grants
            user_repository: Repository for looking up grantees
            session: Database session bound to ``tenant_id``
            tenant_id: Tenant owning the roles
            probe: Optional domain probe for observability
        """
        self._role_repository = role_repository
        self._user_repository = user_repository
        self._session = session
        self._tenant_id = tenant_id
        self._probe = probe or DefaultRoleServiceProbe()

    async def create_role(self, name: str, description: str | None = None) -> Role:
        """Create a role in the tenant.

        Raises:
            ValueError: If the name is empty or too long
            DuplicateRoleNameError: If the tenant already has a role by that name
        """
        role = Role.create(
            tenant_id=self._tenant_id, name=name, description=description
        )
        async with self._session.begin():
            await self._role_repository.save(role)

        self._probe.role_created(role_id=role.id.value, name=role.name)
        return role

    async def list_roles(self) -> list[Role]:
        return await self._role_repository.list_all()

    async def delete_role(self, role_id: RoleId) -> bool:
        """Delete a role and revoke it from everyone holding it.

        Returns:
            True if deleted, False if not found
        """
        async with self._session.begin():
            role = await self._role_repository.get_by_id(role_id)
            if role is None:
                return False
            deleted = await self._role_repository.delete(role)

        if deleted:
            self._probe.role_deleted(role_id=role_id.value)
        return deleted

    async def assign_role(self, user_id: UserId, role_name: str) -> bool:
        """Grant a role to a user. Granting a role twice is harmless.

        Returns:
            False if the user or the role does not exist
        """
        async with self._session.begin():
            role = await self._role_repository.get_by_name(role_name)
            user = await self._user_repository.get_by_id(user_id)
            if role is None or user is None:
                return False
            granted = await self._role_repository.add_user(role, user_id)

        if granted:
            self._probe.role_assignment_changed(
                role_name=role.name, user_id=user_id.value, granted=True
            )
        return True

    async def remove_role(self, user_id: UserId, role_name: str) -> bool:
        """Revoke a role from a user.

        Returns:
            False if the user or the role does not exist
        """
        async with self._session.begin():
            role = await self._role_repository.get_by_name(role_name)
            user = await self._user_repository.get_by_id(user_id)
            if role is None or user is None:
                return False
            revoked = await self._role_repository.remove_user(role, user_id)

        if revoked:
            self._probe.role_assignment_changed(
                role_name=role.name, user_id=user_id.value, granted=False
            )
        return True

    async def list_users_in_role(self, role_name: str) -> list[User] | None:
        """Users holding a role, or None if the role does not exist."""
        role = await self._role_repository.get_by_name(role_name)
        if role is None:
            return None
        return await self._role_repository.list_users(role)
