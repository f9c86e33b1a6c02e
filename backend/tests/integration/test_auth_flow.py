"""Integration tests for the authentication flow

Tests cover:
- Sign-up with password policy and duplicate email checks
- Sign-in with valid and invalid credentials
- Session token via Authorization header and cookie
- Sign-out revoking the session
- Linking invited member records on sign-up
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from crewbook.auth.jwt import decode_token
from crewbook.models import AuditLog, Member


pytestmark = pytest.mark.integration

SIGN_UP_PASSWORD = "Quiet-Harbour-Lamp-17"


def _sign_up(client: TestClient, email="nina@acme.io", password=SIGN_UP_PASSWORD, name="Nina New"):
    return client.post(
        "/api/auth/sign-up",
        json={"name": name, "email": email, "password": password},
    )


class TestSignUp:

    def test_sign_up_creates_user_and_session(self, client: TestClient):
        response = _sign_up(client)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "nina@acme.io"
        assert data["user"]["role"] == "user"
        assert "password_hash" not in data["user"]
        assert decode_token(data["token"])["email"] == "nina@acme.io"
        assert "crewbook_session" in response.cookies

    def test_sign_up_normalises_email(self, client: TestClient):
        response = _sign_up(client, email="Nina@ACME.io")
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "nina@acme.io"

    def test_duplicate_email_rejected(self, client: TestClient):
        assert _sign_up(client).status_code == 201

        response = _sign_up(client, email="NINA@acme.io")
        assert response.status_code == 409
        assert response.json()["detail"] == "User with this email already exists"

    def test_weak_password_rejected(self, client: TestClient):
        response = _sign_up(client, password="password")

        assert response.status_code == 400
        assert "Password does not meet security requirements" in response.json()["detail"]

    def test_invalid_email_rejected(self, client: TestClient):
        response = _sign_up(client, email="not-an-email")
        assert response.status_code == 422
        assert "email" in response.json()["details"]

    def test_sign_up_links_invited_member(self, client: TestClient, db_session: Session, org_setup, admin_user, member_factory):
        invited = member_factory(
            org_setup.organisation, admin_user, "Nina New", "nina@acme.io",
        )
        assert invited.user_id is None

        response = _sign_up(client)
        assert response.status_code == 201

        db_session.expire_all()
        member = db_session.get(Member, invited.id)
        assert str(member.user_id) == response.json()["user"]["id"]

        headers = {"Authorization": f"Bearer {response.json()['token']}"}
        memberships = client.get("/api/members/me", headers=headers).json()
        assert memberships["total"] == 1
        assert memberships["memberships"][0]["org"]["slug"] == "acme"


class TestSignIn:

    def test_sign_in_with_valid_credentials(self, client: TestClient, admin_user, test_password):
        response = client.post(
            "/api/auth/sign-in",
            json={"email": "ana@acme.io", "password": test_password},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == str(admin_user.id)
        assert decode_token(data["token"])["sub"] == str(admin_user.id)

    def test_sign_in_email_is_case_insensitive(self, client: TestClient, admin_user, test_password):
        response = client.post(
            "/api/auth/sign-in",
            json={"email": "ANA@acme.io", "password": test_password},
        )
        assert response.status_code == 200

    def test_wrong_password(self, client: TestClient, db_session: Session, admin_user):
        response = client.post(
            "/api/auth/sign-in",
            json={"email": "ana@acme.io", "password": "Wrong-Kettle-Rain-42"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

        failures = db_session.execute(
            select(AuditLog).where(AuditLog.action == "SIGN_IN_FAILED")
        ).scalars().all()
        assert len(failures) == 1
        assert failures[0].actor_id == admin_user.id

    def test_unknown_email_same_error(self, client: TestClient, test_password):
        response = client.post(
            "/api/auth/sign-in",
            json={"email": "ghost@acme.io", "password": test_password},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


class TestSession:

    def test_me_with_bearer_token(self, client: TestClient, admin_user, admin_headers):
        response = client.get("/api/auth/me", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == "ana@acme.io"
        assert "expires_at" in data["session"]

    def test_me_with_session_cookie(self, client: TestClient, admin_user, test_password):
        sign_in = client.post(
            "/api/auth/sign-in",
            json={"email": "ana@acme.io", "password": test_password},
        )
        assert sign_in.status_code == 200

        # TestClient keeps the cookie set by sign-in
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(admin_user.id)

    def test_me_without_token(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_sign_out_revokes_session(self, client: TestClient, admin_headers):
        response = client.post("/api/auth/sign-out", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Session not found or revoked"
