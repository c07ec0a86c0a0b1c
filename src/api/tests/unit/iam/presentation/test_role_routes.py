"""Unit tests for tenant role routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from iam.application.services import RoleService
from iam.application.value_objects import CurrentUser
from iam.dependencies.role import get_role_service
from iam.dependencies.user import get_current_user
from iam.domain.aggregates import Role, User
from iam.domain.value_objects import RoleId, TenantId, UserId
from iam.ports.exceptions import DuplicateRoleNameError
from iam.presentation import router

TENANT_ID = TenantId.generate()


@pytest.fixture
def mock_role_service() -> AsyncMock:
    """Mock RoleService for testing."""
    return AsyncMock(spec=RoleService)


@pytest.fixture
def current_user() -> CurrentUser:
    return CurrentUser(user_id=UserId.generate(), tenant_id=TENANT_ID, username="ada")


def _create_test_client(
    *,
    mock_role_service: AsyncMock,
    current_user: CurrentUser | None,
) -> TestClient:
    """Create a TestClient with dependency overrides.

    Args:
        mock_role_service: Mock for the RoleService dependency.
        current_user: Authenticated caller, or None for an anonymous request.
    """
    app = FastAPI()
    app.dependency_overrides[get_role_service] = lambda: mock_role_service
    if current_user is not None:
        app.dependency_overrides[get_current_user] = lambda: current_user
    app.include_router(router)
    return TestClient(app)


@pytest.fixture
def client(mock_role_service, current_user) -> TestClient:
    return _create_test_client(
        mock_role_service=mock_role_service, current_user=current_user
    )


class TestAuthenticationRequired:
    """Role routes refuse anonymous callers."""

    def test_anonymous_request_is_401(self, mock_role_service):
        client = _create_test_client(
            mock_role_service=mock_role_service, current_user=None
        )
        # never read without a bearer token
        client.app.state.security = None

        response = client.get("/iam/roles")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        mock_role_service.list_roles.assert_not_called()


class TestRoles:
    """Tests for role creation, listing and deletion."""

    def test_create(self, client, mock_role_service):
        role = Role.create(tenant_id=TENANT_ID, name="admin", description="Admins")
        mock_role_service.create_role.return_value = role

        response = client.post(
            "/iam/roles", json={"name": "admin", "description": "Admins"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {
            "id": role.id.value,
            "name": "admin",
            "description": "Admins",
            "tenant_id": TENANT_ID.value,
        }
        mock_role_service.create_role.assert_awaited_once_with("admin", "Admins")

    def test_create_duplicate_is_409(self, client, mock_role_service):
        mock_role_service.create_role.side_effect = DuplicateRoleNameError(
            "Role 'admin' already exists"
        )

        response = client.post("/iam/roles", json={"name": "admin"})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_create_blank_is_422(self, client, mock_role_service):
        mock_role_service.create_role.side_effect = ValueError("Role name is required")

        response = client.post("/iam/roles", json={"name": " "})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list(self, client, mock_role_service):
        mock_role_service.list_roles.return_value = [
            Role.create(tenant_id=TENANT_ID, name="admin"),
            Role.create(tenant_id=TENANT_ID, name="viewer"),
        ]

        response = client.get("/iam/roles")

        assert [r["name"] for r in response.json()] == ["admin", "viewer"]

    def test_delete(self, client, mock_role_service):
        role_id = RoleId.generate()
        mock_role_service.delete_role.return_value = True

        response = client.delete(f"/iam/roles/{role_id.value}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        mock_role_service.delete_role.assert_awaited_once_with(role_id)

    def test_delete_missing(self, client, mock_role_service):
        mock_role_service.delete_role.return_value = False

        response = client.delete(f"/iam/roles/{RoleId.generate().value}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_invalid_id(self, client, mock_role_service):
        response = client.delete("/iam/roles/not-a-ulid")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_role_service.delete_role.assert_not_called()


class TestRoleMembership:
    """Tests for granting, revoking and listing role members."""

    def test_list_members(self, client, mock_role_service):
        user = User.create(tenant_id=TENANT_ID, email="ada@x.com", password_hash="x")
        mock_role_service.list_users_in_role.return_value = [user]

        response = client.get("/iam/roles/admin/users")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == [
            {
                "id": user.id.value,
                "email": "ada@x.com",
                "username": user.username,
                "is_active": True,
            }
        ]

    def test_list_members_of_missing_role(self, client, mock_role_service):
        mock_role_service.list_users_in_role.return_value = None

        response = client.get("/iam/roles/ghost/users")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_assign(self, client, mock_role_service):
        user_id = UserId.generate()
        mock_role_service.assign_role.return_value = True

        response = client.put(f"/iam/roles/admin/users/{user_id.value}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        mock_role_service.assign_role.assert_awaited_once_with(user_id, "admin")

    def test_assign_unknown(self, client, mock_role_service):
        mock_role_service.assign_role.return_value = False

        response = client.put(f"/iam/roles/admin/users/{UserId.generate().value}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_assign_invalid_user_id(self, client, mock_role_service):
        response = client.put("/iam/roles/admin/users/not-a-ulid")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_role_service.assign_role.assert_not_called()

    def test_remove(self, client, mock_role_service):
        user_id = UserId.generate()
        mock_role_service.remove_role.return_value = True

        response = client.delete(f"/iam/roles/admin/users/{user_id.value}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        mock_role_service.remove_role.assert_awaited_once_with(user_id, "admin")
