"""PostgreSQL implementation of ITenantRepository.

This repository manages tenant metadata storage in PostgreSQL. Tenants
are not tenant-scoped, so it works the same on bound and unbound
sessions.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId, TenantIdentifier
from iam.infrastructure.models import TenantModel, UserModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.exceptions import DuplicateTenantIdentifierError
from iam.ports.repositories import ITenantRepository


def _to_domain(model: TenantModel) -> Tenant:
    return Tenant(
        id=TenantId(value=model.id),
        identifier=TenantIdentifier(model.identifier),
        name=model.name,
        is_active=model.is_active,
        connection_override=model.connection_override,
        settings=model.settings,
        created_at=model.created_at,
    )


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist tenant metadata to PostgreSQL.

        Args:
            tenant: The Tenant aggregate to persist

        Raises:
            DuplicateTenantIdentifierError: If the identifier already exists
        """
        existing = await self.get_by_identifier(tenant.identifier.value)
        if existing and existing.id.value != tenant.id.value:
            self._probe.duplicate_tenant_identifier(tenant.identifier.value)
            raise DuplicateTenantIdentifierError(
                f"Tenant '{tenant.identifier.value}' already exists"
            )

        try:
            stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            if model:
                # The identifier is immutable once created
                model.name = tenant.name
                model.is_active = tenant.is_active
                model.connection_override = tenant.connection_override
                model.settings = tenant.settings
            else:
                model = TenantModel(
                    id=tenant.id.value,
                    identifier=tenant.identifier.value,
                    name=tenant.name,
                    is_active=tenant.is_active,
                    connection_override=tenant.connection_override,
                    settings=tenant.settings,
                    created_at=tenant.created_at,
                )
                self._session.add(model)

            await self._session.flush()
            self._probe.tenant_saved(tenant.id.value)

        except IntegrityError as e:
            if "ix_tenants_identifier" in str(e):
                self._probe.duplicate_tenant_identifier(tenant.identifier.value)
                raise DuplicateTenantIdentifierError(
                    f"Tenant '{tenant.identifier.value}' already exists"
                ) from e
            raise

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch tenant metadata from PostgreSQL.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.tenant_retrieved(model.id)
        return _to_domain(model)

    async def get_by_identifier(self, identifier: str) -> Tenant | None:
        """Fetch tenant by its public identifier.

        Args:
            identifier: The tenant identifier slug

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.identifier == identifier)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.tenant_retrieved(model.id)
        return _to_domain(model)

    async def list_all(self) -> list[Tenant]:
        """Fetch all tenants from PostgreSQL.

        Returns:
            List of all Tenant aggregates, ordered by identifier
        """
        stmt = select(TenantModel).order_by(TenantModel.identifier)
        result = await self._session.execute(stmt)
        tenants = [_to_domain(model) for model in result.scalars().all()]

        self._probe.tenants_listed(len(tenants))
        return tenants

    async def count_users(self, tenant_id: TenantId) -> int:
        """Count the principals that belong to a tenant."""
        stmt = (
            select(func.count())
            .select_from(UserModel)
            .where(UserModel.tenant_id == tenant_id.value)
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def delete(self, tenant: Tenant) -> bool:
        """Delete tenant from PostgreSQL.

        Args:
            tenant: The Tenant aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()

        self._probe.tenant_deleted(tenant.id.value)
        return True
