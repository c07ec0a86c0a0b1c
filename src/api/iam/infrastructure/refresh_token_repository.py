"""PostgreSQL implementation of IRefreshTokenRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import RefreshToken
from iam.domain.value_objects import TenantId, UserId
from iam.infrastructure.models import RefreshTokenModel
from iam.ports.repositories import IRefreshTokenRepository
from infrastructure.database import ensure_tenant_write


class RefreshTokenRepository(IRefreshTokenRepository):
    """Stores one refresh token digest per principal.

    ``store`` overwrites the principal's row, so the last issued token is
    the only one that can be exchanged.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def store(self, token: RefreshToken) -> None:
        ensure_tenant_write(
            self._session, RefreshTokenModel.__name__, token.tenant_id.value
        )
        stmt = insert(RefreshTokenModel).values(
            user_id=token.user_id.value,
            tenant_id=token.tenant_id.value,
            token_hash=token.token_hash,
            expires_at=token.expires_at,
            created_at=token.created_at,
        )
        # Concurrent sign-ins of one principal race on the primary key; the
        # last writer wins.
        stmt = stmt.on_conflict_do_update(
            index_elements=[RefreshTokenModel.user_id],
            set_={
                "token_hash": stmt.excluded.token_hash,
                "expires_at": stmt.excluded.expires_at,
                "created_at": stmt.excluded.created_at,
            },
            where=RefreshTokenModel.tenant_id == stmt.excluded.tenant_id,
        )
        await self._session.execute(stmt)

    async def get_by_token_hash(self, token_hash: str) -> RefreshToken | None:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.token_hash == token_hash
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return RefreshToken(
            user_id=UserId(value=model.user_id),
            tenant_id=TenantId(value=model.tenant_id),
            token_hash=model.token_hash,
            expires_at=model.expires_at,
            created_at=model.created_at,
        )

    async def revoke(self, user_id: UserId) -> bool:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.user_id == user_id.value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True
