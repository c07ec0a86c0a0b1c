"""Tenant application service for IAM bounded context.

Handles the tenant registry: administration of tenants and resolution of
the active tenant for a request.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultTenantServiceProbe, TenantServiceProbe
from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import DuplicateTenantIdentifierError, TenantHasUsersError
from iam.ports.repositories import ITenantRepository
from shared_kernel.middleware import TenantContext


class TenantService:
    """Application service for tenant management.

    Tenants are global records; this service never binds its session to
    a tenant. Write operations run in their own transaction.
    """

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        session: AsyncSession,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            session: Database session for transaction management
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._session = session
        self._probe = probe or DefaultTenantServiceProbe()

    async def create_tenant(
        self,
        identifier: str,
        name: str,
        connection_override: str | None = None,
        settings: str | None = None,
    ) -> Tenant:
        """Create a new, active tenant.

        Args:
            identifier: Public slug (lowercase letters, digits, hyphens)
            name: Display name
            connection_override: Optional per-tenant connection string
            settings: Opaque settings blob

        Returns:
            The created Tenant aggregate

        Raises:
            ValueError: If the identifier or name is invalid
            DuplicateTenantIdentifierError: If the identifier is taken
        """
        tenant = Tenant.create(
            identifier=identifier,
            name=name,
            connection_override=connection_override,
            settings=settings,
        )

        async with self._session.begin():
            try:
                await self._tenant_repository.save(tenant)
            except DuplicateTenantIdentifierError:
                self._probe.duplicate_tenant_identifier(identifier=identifier)
                raise

        self._probe.tenant_created(
            tenant_id=tenant.id.value,
            identifier=tenant.identifier.value,
        )
        return tenant

    async def get_tenant(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its internal ID."""
        tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant=tenant_id.value)
        return tenant

    async def get_tenant_by_identifier(self, identifier: str) -> Tenant | None:
        """Retrieve a tenant by its public identifier."""
        tenant = await self._tenant_repository.get_by_identifier(identifier)
        if tenant is None:
            self._probe.tenant_not_found(tenant=identifier)
        return tenant

    async def list_tenants(self) -> list[Tenant]:
        """List all tenants."""
        return await self._tenant_repository.list_all()

    async def update_tenant(
        self,
        tenant_id: TenantId,
        name: str | None = None,
        settings: str | None = None,
        connection_override: str | None = None,
        is_active: bool | None = None,
    ) -> Tenant | None:
        """Apply a partial update to a tenant.

        ``None`` leaves a field unchanged. The identifier cannot be changed.

        Returns:
            The updated tenant, or None if it does not exist

        Raises:
            ValueError: If the new name or connection override is invalid
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant=tenant_id.value)
                return None

            tenant.update(
                name=name,
                settings=settings,
                connection_override=connection_override,
            )
            if is_active is True:
                tenant.activate()
            elif is_active is False:
                tenant.deactivate()

            await self._tenant_repository.save(tenant)

        self._probe.tenant_updated(tenant_id=tenant_id.value)
        return tenant

    async def activate_tenant(self, tenant_id: TenantId) -> bool:
        """Activate a tenant. Returns False if it does not exist."""
        return await self._set_active(tenant_id, True)

    async def deactivate_tenant(self, tenant_id: TenantId) -> bool:
        """Deactivate a tenant.

        Principals of an inactive tenant can no longer log in, register or
        refresh. Tokens already issued stay valid until they expire.

        Returns:
            False if the tenant does not exist
        """
        return await self._set_active(tenant_id, False)

    async def delete_tenant(self, tenant_id: TenantId) -> bool:
        """Delete a tenant.

        Returns:
            True if deleted, False if not found

        Raises:
            TenantHasUsersError: If principals still belong to the tenant
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant=tenant_id.value)
                return False

            user_count = await self._tenant_repository.count_users(tenant_id)
            if user_count:
                self._probe.tenant_deletion_blocked(
                    tenant_id=tenant_id.value, user_count=user_count
                )
                raise TenantHasUsersError(
                    f"Tenant '{tenant.identifier}' still has {user_count} user(s)"
                )

            deleted = await self._tenant_repository.delete(tenant)

        if deleted:
            self._probe.tenant_deleted(tenant_id=tenant_id.value)
        return deleted

    async def resolve_active_tenant(self, context: TenantContext) -> Tenant | None:
        """Look up the tenant named by a resolved tenant context.

        A context resolved from a token claim carries the internal id;
        any other source carries the public identifier.

        Returns:
            The tenant, or None if it does not exist or is inactive
        """
        async with self._session.begin():
            if context.is_internal_id:
                try:
                    tenant_id = TenantId.from_string(context.tenant)
                except ValueError:
                    tenant = None
                else:
                    tenant = await self._tenant_repository.get_by_id(tenant_id)
            else:
                tenant = await self._tenant_repository.get_by_identifier(
                    context.tenant
                )

        if tenant is None:
            self._probe.tenant_not_found(tenant=context.tenant)
            return None
        if not tenant.is_active:
            self._probe.tenant_inactive(tenant_id=tenant.id.value)
            return None
        return tenant

    async def _set_active(self, tenant_id: TenantId, active: bool) -> bool:
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant=tenant_id.value)
                return False

            if active:
                tenant.activate()
            else:
                tenant.deactivate()
            await self._tenant_repository.save(tenant)

        self._probe.tenant_activation_changed(
            tenant_id=tenant_id.value, is_active=active
        )
        return True
