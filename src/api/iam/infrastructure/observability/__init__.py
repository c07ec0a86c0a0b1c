"""Domain-Oriented Observability for IAM infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from iam.infrastructure.observability.repository_probe import (
    DefaultRoleRepositoryProbe,
    DefaultTenantRepositoryProbe,
    DefaultUserRepositoryProbe,
    RoleRepositoryProbe,
    TenantRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "DefaultRoleRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "RoleRepositoryProbe",
    "TenantRepositoryProbe",
    "UserRepositoryProbe",
]
