"""IAM presentation layer - aggregate-based organization.

Organizes presentation concerns by use case (auth, tenants, roles, users)
following vertical slicing. Each package contains its own routes and
models.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation.auth.routes import router as auth_router
from iam.presentation.roles.routes import router as roles_router
from iam.presentation.tenants.routes import router as tenants_router
from iam.presentation.users.routes import router as users_router

# Auth is enforced per router or endpoint: tenant administration and
# sign-in are anonymous, roles, users and the current-principal endpoints
# are not.
router = APIRouter(
    prefix="/iam",
    tags=["iam"],
)

router.include_router(auth_router)
router.include_router(tenants_router)
router.include_router(roles_router)
router.include_router(users_router)

__all__ = ["router"]
