"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories and domain services without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from iam.ports.credentials import CredentialCheckOutcome, ICredentialVerifier
from iam.ports.exceptions import (
    DuplicateRoleNameError,
    DuplicateTenantIdentifierError,
    DuplicateUserError,
    TenantHasUsersError,
)
from iam.ports.repositories import (
    IRefreshTokenRepository,
    IRoleRepository,
    ITenantRepository,
    IUserRepository,
)

__all__ = [
    "CredentialCheckOutcome",
    "DuplicateRoleNameError",
    "DuplicateTenantIdentifierError",
    "DuplicateUserError",
    "ICredentialVerifier",
    "IRefreshTokenRepository",
    "IRoleRepository",
    "ITenantRepository",
    "IUserRepository",
    "TenantHasUsersError",
]
