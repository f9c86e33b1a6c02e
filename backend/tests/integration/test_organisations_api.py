"""Integration tests for organisation endpoints

Tests cover:
- Creating an organisation (creator becomes admin member)
- Slug validation and uniqueness
- Member, HR and admin views
- Update and delete by organisation admins
- Listing all organisations as system admin
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from crewbook.auth.roles import MemberStatus
from crewbook.models import AuditLog, Member, Organisation


pytestmark = pytest.mark.integration


class TestCreateOrganisation:

    def test_create_makes_caller_admin(self, client: TestClient, db_session: Session, outsider_user, outsider_headers):
        response = client.post(
            "/api/organisations",
            json={"name": "Initech", "slug": "initech", "country": "Germany", "address": None},
            headers=outsider_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "initech"
        assert data["plan"] == "free"
        assert data["member"]["role"] == "admin"
        assert data["member"]["status"] == "active"
        assert data["member"]["user_id"] == str(outsider_user.id)

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "ORGANISATION_CREATED")
        ).scalar_one()
        assert str(entry.org_id) == data["id"]

    def test_duplicate_slug(self, client: TestClient, org_setup, outsider_headers):
        response = client.post(
            "/api/organisations",
            json={"name": "Acme Two", "slug": "acme", "country": None, "address": None},
            headers=outsider_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Organisation with this slug already exists"

    @pytest.mark.parametrize("slug", ["Acme Corp", "acme_corp", "acme--corp", "-acme"])
    def test_invalid_slug(self, client: TestClient, outsider_headers, slug):
        response = client.post(
            "/api/organisations",
            json={"name": "Acme", "slug": slug, "country": None, "address": None},
            headers=outsider_headers,
        )
        assert response.status_code == 422
        assert "slug" in response.json()["details"]

    def test_requires_authentication(self, client: TestClient):
        response = client.post("/api/organisations", json={"name": "Acme", "slug": "acme", "country": None, "address": None})
        assert response.status_code == 401


class TestReadOrganisation:

    def test_member_view_lists_active_members_only(
        self, client: TestClient, org_setup, admin_user, member_factory, employee_headers
    ):
        member_factory(
            org_setup.organisation, admin_user, "Ina Inactive", "ina@acme.io",
            status=MemberStatus.INACTIVE,
        )

        response = client.get("/api/organisations/acme", headers=employee_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Acme Inc"
        emails = {m["email"] for m in data["members"]}
        assert emails == {"ana@acme.io", "henry@acme.io", "eve@acme.io"}
        assert set(data["members"][0]) == {"id", "name", "email", "role", "dept"}

    def test_unknown_slug(self, client: TestClient, employee_headers):
        response = client.get("/api/organisations/nowhere", headers=employee_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Organisation not found"

    def test_settings_for_admin(self, client: TestClient, org_setup, admin_headers):
        response = client.get("/api/organisations/acme/settings", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["plan"] == "free"
        assert len(data["members"]) == 3
        assert "user_id" in data["members"][0]

    def test_settings_denied_for_hr(self, client: TestClient, org_setup, hr_headers):
        response = client.get("/api/organisations/acme/settings", headers=hr_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required for this organisation"


class TestUpdateOrganisation:

    def test_admin_updates(self, client: TestClient, db_session: Session, org_setup, admin_headers):
        response = client.put(
            "/api/organisations/acme",
            json={"name": "Acme Europe", "slug": "acme-eu", "country": "Portugal", "address": "Lisboa"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["slug"] == "acme-eu"
        assert client.get("/api/organisations/acme-eu", headers=admin_headers).status_code == 200

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "ORGANISATION_UPDATED")
        ).scalar_one()
        assert entry.metadata_json["changes"]["slug"] == {"old": "acme", "new": "acme-eu"}
        assert "country" not in entry.metadata_json["changes"]

    def test_slug_taken_by_other_organisation(self, client: TestClient, org_setup, other_org_setup, admin_headers):
        response = client.put(
            "/api/organisations/acme",
            json={"name": "Acme", "slug": "globex", "country": None, "address": None},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_keeping_own_slug_is_allowed(self, client: TestClient, org_setup, admin_headers):
        response = client.put(
            "/api/organisations/acme",
            json={"name": "Acme Renamed", "slug": "acme", "country": "Portugal", "address": None},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Acme Renamed"

    def test_missing_nullable_keys_rejected(self, client: TestClient, db_session: Session, org_setup, admin_headers):
        organisation = org_setup.organisation
        organisation.address = "Rua Augusta 1"
        db_session.commit()

        response = client.put(
            "/api/organisations/acme",
            json={"name": "Acme", "slug": "acme"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        details = response.json()["details"]
        assert "country" in details
        assert "address" in details

        db_session.expire_all()
        assert organisation.country == "Portugal"
        assert organisation.address == "Rua Augusta 1"

    def test_hr_cannot_update(self, client: TestClient, org_setup, hr_headers):
        response = client.put(
            "/api/organisations/acme",
            json={"name": "Hacked", "slug": "acme", "country": None, "address": None},
            headers=hr_headers,
        )
        assert response.status_code == 403


class TestDeleteOrganisation:

    def test_admin_deletes_with_members(self, client: TestClient, db_session: Session, org_setup, admin_headers):
        org_id = org_setup.organisation.id

        response = client.delete("/api/organisations/acme", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Organisation deleted successfully"}

        db_session.expire_all()
        assert db_session.get(Organisation, org_id) is None
        remaining = db_session.execute(select(Member).where(Member.org_id == org_id)).scalars().all()
        assert remaining == []

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "ORGANISATION_DELETED")
        ).scalar_one()
        assert entry.org_id is None
        assert entry.entity_id == org_id

    def test_employee_cannot_delete(self, client: TestClient, org_setup, employee_headers):
        response = client.delete("/api/organisations/acme", headers=employee_headers)
        assert response.status_code == 403


class TestListOrganisations:

    def test_system_admin_lists_all(self, client: TestClient, org_setup, other_org_setup, system_admin_headers):
        response = client.get("/api/organisations", headers=system_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {o["slug"] for o in data["organisations"]} == {"acme", "globex"}

    def test_regular_user_denied(self, client: TestClient, org_setup, admin_headers):
        response = client.get("/api/organisations", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"
