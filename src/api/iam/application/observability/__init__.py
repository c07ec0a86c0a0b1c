"""Observability for IAM application services."""

from iam.application.observability.auth_service_probe import (
    AuthServiceProbe,
    DefaultAuthServiceProbe,
)
from iam.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.observability.role_service_probe import (
    DefaultRoleServiceProbe,
    RoleServiceProbe,
)
from iam.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from iam.application.observability.user_service_probe import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)

__all__ = [
    "AuthServiceProbe",
    "AuthenticationProbe",
    "DefaultAuthServiceProbe",
    "DefaultAuthenticationProbe",
    "DefaultRoleServiceProbe",
    "DefaultTenantServiceProbe",
    "DefaultUserServiceProbe",
    "RoleServiceProbe",
    "TenantServiceProbe",
    "UserServiceProbe",
]
