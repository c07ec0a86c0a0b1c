"""Application services for IAM bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the IAM context.
"""

from iam.application.services.auth_service import AuthService
from iam.application.services.role_service import RoleService
from iam.application.services.tenant_service import TenantService
from iam.application.services.user_service import UserService

__all__ = [
    "AuthService",
    "RoleService",
    "TenantService",
    "UserService",
]
