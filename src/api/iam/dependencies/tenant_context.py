"""Tenant context FastAPI dependency.

Gathers the tenant signals of a request (validated token claims,
headers, path and query parameters) and resolves them with
``TenantResolver``. Resolution never fails: a request without any usable
signal yields ``None`` and each endpoint decides what that means.

Usage in FastAPI routes:
    @router.post("/example")
    async def example(
        tenant: Annotated[TenantContext | None, Depends(get_tenant_context)],
    ):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from iam.dependencies.authentication import get_token_claims
from infrastructure.settings import (
    TenantResolutionSettings,
    get_tenant_resolution_settings,
)
from shared_kernel.auth import TokenClaims
from shared_kernel.middleware import TenantContext, TenantResolver, TenantSignals


def get_tenant_resolver(
    settings: Annotated[
        TenantResolutionSettings, Depends(get_tenant_resolution_settings)
    ],
) -> TenantResolver:
    """Get a TenantResolver configured from settings."""
    return TenantResolver(
        claim_name=settings.claim_name,
        header_name=settings.header_name,
        route_parameter=settings.route_parameter,
        query_parameter=settings.query_parameter,
    )


def get_tenant_context(
    request: Request,
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
    claims: Annotated[TokenClaims | None, Depends(get_token_claims)],
) -> TenantContext | None:
    """Resolve the tenant of the current request.

    Claims are only consulted when they come from a validated token.
    """
    signals = TenantSignals(
        authenticated=claims is not None,
        claims=claims.as_mapping() if claims is not None else {},
        headers=request.headers,
        route_params=request.path_params,
        query_params=request.query_params,
    )
    return resolver.resolve(signals)
