"""Integration tests for member endpoints

Tests cover:
- Role-dependent member lists (admin vs HR)
- Adding members, email uniqueness and account linking
- Full updates by admin/HR and name-only self updates
- Deactivation (soft delete)
- The caller's own memberships
"""

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from crewbook.auth.roles import MemberStatus
from crewbook.models import AuditLog


pytestmark = pytest.mark.integration


def _member_payload(**overrides):
    data = {
        "role": "employee",
        "name": "Nico New",
        "email": "nico@acme.io",
        "dept": "Engineering",
        "start_date": "2024-01-15T00:00:00Z",
        "status": "active",
        "country": "Portugal",
    }
    data.update(overrides)
    return data


class TestListMembers:

    def test_admin_sees_full_records(self, client: TestClient, org_setup, admin_headers):
        response = client.get("/api/organisations/acme/members", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["plan"] == "free"
        assert len(data["members"]) == 3
        assert "user_id" in data["members"][0]
        assert "updated_at" in data["members"][0]

    def test_hr_sees_hr_view(self, client: TestClient, org_setup, hr_headers):
        response = client.get("/api/organisations/acme/members", headers=hr_headers)

        assert response.status_code == 200
        data = response.json()
        assert "updated_at" not in data
        member = data["members"][0]
        assert "user_id" not in member
        assert "status" in member

    def test_employee_denied(self, client: TestClient, org_setup, employee_headers):
        response = client.get("/api/organisations/acme/members", headers=employee_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin or HR access required for this organisation"


class TestCreateMember:

    def test_create_returns_member_with_organisation(self, client: TestClient, db_session: Session, org_setup, hr_headers):
        response = client.post("/api/organisations/acme/members", json=_member_payload(), headers=hr_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "nico@acme.io"
        assert data["user_id"] is None
        assert data["org"] == {
            "id": str(org_setup.organisation.id),
            "name": "Acme Inc",
            "slug": "acme",
        }

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "MEMBER_CREATED")
            .where(AuditLog.entity_id == UUID(data["id"]))
        ).scalar_one_or_none()
        assert entry is not None

    def test_duplicate_email_in_organisation(self, client: TestClient, org_setup, admin_headers):
        response = client.post(
            "/api/organisations/acme/members",
            json=_member_payload(email="EVE@acme.io"),
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "A member with this email already exists in this organisation"

    def test_same_email_allowed_in_other_organisation(self, client: TestClient, org_setup, other_org_setup, outsider_headers):
        response = client.post(
            "/api/organisations/globex/members",
            json=_member_payload(email="eve@acme.io"),
            headers=outsider_headers,
        )
        assert response.status_code == 201

    def test_unknown_user_id(self, client: TestClient, org_setup, admin_headers):
        response = client.post(
            "/api/organisations/acme/members",
            json=_member_payload(user_id=str(uuid4())),
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_links_existing_account_by_email(self, client: TestClient, org_setup, outsider_user, admin_headers):
        response = client.post(
            "/api/organisations/acme/members",
            json=_member_payload(email="oscar@elsewhere.io", name="Oscar"),
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["user_id"] == str(outsider_user.id)

    def test_invalid_payload(self, client: TestClient, org_setup, admin_headers):
        response = client.post(
            "/api/organisations/acme/members",
            json=_member_payload(role="boss", email="nope"),
            headers=admin_headers,
        )

        assert response.status_code == 422
        details = response.json()["details"]
        assert "role" in details
        assert "email" in details

    def test_employee_cannot_add(self, client: TestClient, org_setup, employee_headers):
        response = client.post("/api/organisations/acme/members", json=_member_payload(), headers=employee_headers)
        assert response.status_code == 403


class TestGetMember:

    def test_admin_reads_member(self, client: TestClient, org_setup, admin_headers):
        member_id = org_setup.employee_member.id
        response = client.get(f"/api/organisations/acme/members/{member_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "eve@acme.io"

    def test_employee_cannot_read_for_editing(self, client: TestClient, org_setup, employee_headers):
        member_id = org_setup.employee_member.id
        response = client.get(f"/api/organisations/acme/members/{member_id}", headers=employee_headers)
        assert response.status_code == 403

    def test_unknown_member(self, client: TestClient, org_setup, admin_headers):
        response = client.get(f"/api/organisations/acme/members/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Member not found"


class TestUpdateMember:

    def test_full_update_returns_user_and_org(self, client: TestClient, db_session: Session, org_setup, employee_user, hr_headers):
        member_id = org_setup.employee_member.id
        response = client.put(
            f"/api/organisations/acme/members/{member_id}",
            json=_member_payload(
                name="Eve Employee",
                email="eve@acme.io",
                dept="Finance",
                status="vacation",
            ),
            headers=hr_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["dept"] == "Finance"
        assert data["status"] == "vacation"
        assert data["org"]["slug"] == "acme"
        assert data["user"]["id"] == str(employee_user.id)

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "MEMBER_UPDATED")
        ).scalar_one()
        changes = entry.metadata_json["changes"]
        assert changes["dept"] == {"old": None, "new": "Finance"}
        assert changes["status"] == {"old": "active", "new": "vacation"}
        assert "name" not in changes

    def test_email_collision(self, client: TestClient, org_setup, admin_headers):
        member_id = org_setup.employee_member.id
        response = client.put(
            f"/api/organisations/acme/members/{member_id}",
            json=_member_payload(email="henry@acme.io"),
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_missing_nullable_keys_rejected(self, client: TestClient, db_session: Session, org_setup, admin_headers):
        member = org_setup.employee_member
        member.dept = "Sales"
        db_session.commit()

        response = client.put(
            f"/api/organisations/acme/members/{member.id}",
            json={"role": "employee", "name": "Eve", "email": "eve@acme.io", "status": "active"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert {"dept", "start_date", "country"} <= set(response.json()["details"])

        db_session.expire_all()
        assert member.dept == "Sales"

    def test_employee_cannot_full_update_self(self, client: TestClient, org_setup, employee_headers):
        member_id = org_setup.employee_member.id
        response = client.put(
            f"/api/organisations/acme/members/{member_id}",
            json=_member_payload(email="eve@acme.io", role="admin"),
            headers=employee_headers,
        )
        assert response.status_code == 403


class TestSelfUpdate:

    def test_member_renames_self(self, client: TestClient, org_setup, employee_headers):
        member_id = org_setup.employee_member.id
        response = client.patch(
            f"/api/organisations/acme/members/{member_id}",
            json={"name": "Eve Evans"},
            headers=employee_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Eve Evans"
        assert response.json()["role"] == "employee"

    def test_self_update_rejects_role_change(self, client: TestClient, org_setup, employee_headers):
        member_id = org_setup.employee_member.id
        response = client.patch(
            f"/api/organisations/acme/members/{member_id}",
            json={"name": "Eve", "role": "admin"},
            headers=employee_headers,
        )
        assert response.status_code == 422

    def test_cannot_rename_other_member(self, client: TestClient, org_setup, employee_headers):
        member_id = org_setup.hr_member.id
        response = client.patch(
            f"/api/organisations/acme/members/{member_id}",
            json={"name": "Renamed"},
            headers=employee_headers,
        )
        assert response.status_code == 403
        assert response.json()["detail"] == (
            "You can only access your own profile or require admin/HR privileges"
        )


class TestDeactivateMember:

    def test_admin_deactivates(self, client: TestClient, org_setup, admin_headers, employee_headers):
        member_id = org_setup.employee_member.id
        response = client.delete(f"/api/organisations/acme/members/{member_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == MemberStatus.INACTIVE.value

        # An inactive member no longer passes organisation checks
        response = client.get("/api/organisations/acme", headers=employee_headers)
        assert response.status_code == 403

    def test_hr_cannot_deactivate(self, client: TestClient, org_setup, hr_headers):
        member_id = org_setup.employee_member.id
        response = client.delete(f"/api/organisations/acme/members/{member_id}", headers=hr_headers)
        assert response.status_code == 403


class TestMyMemberships:

    def test_lists_active_memberships(self, client: TestClient, org_setup, other_org_setup, outsider_user, member_factory, employee_user, employee_headers):
        member_factory(
            other_org_setup.organisation, outsider_user, "Eve Employee", "eve@acme.io",
            user=employee_user,
        )

        response = client.get("/api/members/me", headers=employee_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {m["org"]["slug"] for m in data["memberships"]} == {"acme", "globex"}

    def test_no_memberships(self, client: TestClient, outsider_headers):
        response = client.get("/api/members/me", headers=outsider_headers)
        assert response.status_code == 200
        assert response.json() == {"memberships": [], "total": 0}
