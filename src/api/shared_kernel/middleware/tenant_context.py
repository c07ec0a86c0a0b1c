"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents a resolved
tenant context. It is framework-agnostic and contains no business logic,
making it safe for the shared kernel.

The resolution rules live in ``tenant_resolution``; the FastAPI
dependency that gathers request signals lives in the IAM bounded context.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TenantSource(StrEnum):
    """Request signal a tenant was resolved from, in precedence order."""

    CLAIM = "claim"
    HEADER = "header"
    ROUTE = "route"
    QUERY = "query"


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current request.

    This is a shared kernel value object used across bounded contexts
    to carry the resolved tenant identity.

    Attributes:
        tenant: The resolved value. When ``source`` is ``CLAIM`` this is
            the tenant's internal id (as minted into the token); for every
            other source it is the tenant's public identifier slug.
        source: Which request signal produced the value.
    """

    tenant: str
    source: TenantSource

    @property
    def is_internal_id(self) -> bool:
        """Whether ``tenant`` holds an internal tenant id."""
        return self.source is TenantSource.CLAIM
