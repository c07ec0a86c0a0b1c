"""Shared middleware for cross-cutting concerns.

This module contains the framework-agnostic pieces of tenant resolution:
the ``TenantContext`` value object and the ``TenantResolver`` that picks a
tenant out of competing request signals. The FastAPI dependency that
collects those signals lives in the IAM bounded context.
"""

from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from shared_kernel.middleware.tenant_resolution import TenantResolver, TenantSignals

__all__ = [
    "TenantContext",
    "TenantResolver",
    "TenantSignals",
    "TenantSource",
]
