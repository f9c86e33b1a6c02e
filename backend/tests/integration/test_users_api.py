"""Integration tests for user account endpoints"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from crewbook.models import Member, User


pytestmark = pytest.mark.integration


class TestListUsers:

    def test_system_admin_lists_users(self, client: TestClient, admin_user, employee_user, system_admin_headers):
        response = client.get("/api/users", headers=system_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert {u["email"] for u in data["users"]} == {"ana@acme.io", "eve@acme.io", "sam@crewbook.io"}

    def test_regular_user_denied(self, client: TestClient, admin_headers):
        assert client.get("/api/users", headers=admin_headers).status_code == 403


class TestGetUser:

    def test_own_account(self, client: TestClient, employee_user, employee_headers):
        response = client.get(f"/api/users/{employee_user.id}", headers=employee_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "eve@acme.io"
        assert "password_hash" not in response.json()

    def test_other_account_forbidden(self, client: TestClient, admin_user, employee_headers):
        response = client.get(f"/api/users/{admin_user.id}", headers=employee_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "You can only access your own account"

    def test_system_admin_reads_any(self, client: TestClient, employee_user, system_admin_headers):
        response = client.get(f"/api/users/{employee_user.id}", headers=system_admin_headers)
        assert response.status_code == 200

    def test_unknown_user(self, client: TestClient, system_admin_headers):
        response = client.get(f"/api/users/{uuid4()}", headers=system_admin_headers)
        assert response.status_code == 404


class TestUpdateUser:

    def test_rename_self(self, client: TestClient, employee_user, employee_headers):
        response = client.patch(
            f"/api/users/{employee_user.id}",
            json={"name": "Eve Evans"},
            headers=employee_headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Eve Evans"

    def test_role_cannot_be_set(self, client: TestClient, employee_user, employee_headers):
        response = client.patch(
            f"/api/users/{employee_user.id}",
            json={"name": "Eve", "role": "admin"},
            headers=employee_headers,
        )
        assert response.status_code == 422

    def test_rename_other_forbidden(self, client: TestClient, admin_user, employee_headers):
        response = client.patch(
            f"/api/users/{admin_user.id}",
            json={"name": "Renamed"},
            headers=employee_headers,
        )
        assert response.status_code == 403


class TestDeleteUser:

    def test_delete_unlinks_members(self, client: TestClient, db_session: Session, org_setup, employee_user, system_admin_headers):
        user_id = employee_user.id
        member_id = org_setup.employee_member.id

        response = client.delete(f"/api/users/{user_id}", headers=system_admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}

        db_session.expire_all()
        assert db_session.get(User, user_id) is None
        member = db_session.get(Member, member_id)
        assert member is not None
        assert member.user_id is None

    def test_regular_user_cannot_delete(self, client: TestClient, admin_user, employee_headers):
        response = client.delete(f"/api/users/{admin_user.id}", headers=employee_headers)
        assert response.status_code == 403
