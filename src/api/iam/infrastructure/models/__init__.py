"""SQLAlchemy ORM models for IAM bounded context.

These models map to database tables and are used by repository implementations.
Every model except ``TenantModel`` is tenant-scoped.
"""

from iam.infrastructure.models.refresh_token import RefreshTokenModel
from iam.infrastructure.models.role import RoleModel, UserRoleModel
from iam.infrastructure.models.tenant import TenantModel
from iam.infrastructure.models.user import UserModel

__all__ = [
    "RefreshTokenModel",
    "RoleModel",
    "TenantModel",
    "UserModel",
    "UserRoleModel",
]
