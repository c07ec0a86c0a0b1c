"""Observability for shared middleware operations."""

from shared_kernel.middleware.observability.tenant_resolution_probe import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)

__all__ = [
    "DefaultTenantResolutionProbe",
    "TenantResolutionProbe",
]
