"""Pytest fixtures shared by unit, integration and security tests.

Provides reusable test fixtures for:
- In-memory SQLite database, recreated for every test
- Object storage backed by a moto-mocked S3 bucket
- Users, sessions and an organisation with admin, HR and employee members
- A TestClient wired to the test database and storage

Usage:
    def test_settings(client, org_setup, admin_headers):
        response = client.get("/api/organisations/acme/settings", headers=admin_headers)
        assert response.status_code == 200
"""

import os

# Set environment variables BEFORE any crewbook import so settings pick them up
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-256-bits-minimum-length-required-for-hs256")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
# Nothing listens on port 1: Redis is unavailable and rate limiting is off
os.environ.setdefault("REDIS_URL", "redis://localhost:1/0")
os.environ.setdefault("RATE_LIMIT_MAX_ATTEMPTS", "10000")
os.environ.setdefault("S3_ENDPOINT_URL", "")
os.environ.setdefault("S3_ACCESS_KEY_ID", "testing")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("S3_BUCKET_NAME", "crewbook-test")
os.environ.setdefault("S3_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Generator
from uuid import uuid4

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws
from sqlalchemy.orm import Session

from crewbook.auth.jwt import create_session_token
from crewbook.auth.password import hash_password
from crewbook.auth.repository import SessionRepository
from crewbook.auth.roles import MemberRole, MemberStatus, SystemRole
from crewbook.database import SessionLocal, engine, get_db
from crewbook.infrastructure.storage.factory import get_optional_storage_adapter, get_storage_adapter
from crewbook.infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from crewbook.members.schemas import MemberCreate
from crewbook.members.service import MemberService
from crewbook.models import Base, Member, Organisation, User
from crewbook.organisations.schemas import OrganisationCreate
from crewbook.organisations.service import OrganisationService
from crewbook.users.repository import UserRepository

TEST_PASSWORD = "Blue-Kettle-Rain-42"
TEST_BUCKET = "crewbook-test"


@lru_cache(maxsize=1)
def _test_password_hash() -> str:
    """Argon2 is deliberately slow; hash the shared test password once."""
    return hash_password(TEST_PASSWORD)


def create_user(db: Session, name: str, email: str, role: str = SystemRole.USER.value) -> User:
    """Persist a user whose password is TEST_PASSWORD."""
    user = UserRepository(db).create(
        name=name,
        email=email,
        password_hash=_test_password_hash(),
        role=role,
    )
    db.commit()
    db.refresh(user)
    return user


def auth_headers(db: Session, user: User) -> Dict[str, str]:
    """Open a session for the user and return its Authorization header."""
    session_id = uuid4()
    token, expires_at = create_session_token(user.id, session_id, user.email)
    SessionRepository(db).create(session_id=session_id, user_id=user.id, expires_at=expires_at)
    db.commit()
    return {"Authorization": f"Bearer {token}"}


def add_member(
    db: Session,
    organisation: Organisation,
    actor: User,
    name: str,
    email: str,
    role: MemberRole = MemberRole.EMPLOYEE,
    status: MemberStatus = MemberStatus.ACTIVE,
    user: User = None,
) -> Member:
    data = MemberCreate(
        user_id=user.id if user else None,
        role=role,
        name=name,
        email=email,
        dept=None,
        start_date=None,
        status=status,
        country=None,
    )
    return MemberService(db).create(organisation, data, actor)


@dataclass
class OrgSetup:
    """An organisation with one active member per role."""
    organisation: Organisation
    admin_member: Member
    hr_member: Member
    employee_member: Member


# ============================================================================
# Database and storage
# ============================================================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh schema for every test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def s3_bucket():
    """Mocked S3 with an empty test bucket; yields a raw boto3 client."""
    with mock_aws():
        s3 = boto3.client("s3", region_name="us-east-1")
        s3.create_bucket(Bucket=TEST_BUCKET)
        yield s3


@pytest.fixture(scope="function")
def storage(s3_bucket) -> S3StorageAdapter:
    """S3 adapter bound to the mocked bucket."""
    return S3StorageAdapter(
        endpoint_url=None,
        access_key="testing",
        secret_key="testing",
        bucket_name=TEST_BUCKET,
        region="us-east-1",
    )


@pytest.fixture(scope="function")
def client(db_session: Session, storage: S3StorageAdapter) -> Generator[TestClient, None, None]:
    """TestClient using the test database session and mocked storage."""
    from crewbook.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_adapter] = lambda: storage
    app.dependency_overrides[get_optional_storage_adapter] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# Users
# ============================================================================

@pytest.fixture(scope="function")
def admin_user(db_session: Session) -> User:
    """Creator and admin member of the test organisation."""
    return create_user(db_session, "Ana Admin", "ana@acme.io")


@pytest.fixture(scope="function")
def hr_user(db_session: Session) -> User:
    return create_user(db_session, "Henry Hr", "henry@acme.io")


@pytest.fixture(scope="function")
def employee_user(db_session: Session) -> User:
    return create_user(db_session, "Eve Employee", "eve@acme.io")


@pytest.fixture(scope="function")
def outsider_user(db_session: Session) -> User:
    """Signed-in user with no membership in the test organisation."""
    return create_user(db_session, "Oscar Outsider", "oscar@elsewhere.io")


@pytest.fixture(scope="function")
def system_admin(db_session: Session) -> User:
    return create_user(db_session, "Sam Sysadmin", "sam@crewbook.io", role=SystemRole.ADMIN.value)


@pytest.fixture(scope="function")
def admin_headers(db_session: Session, admin_user: User) -> Dict[str, str]:
    return auth_headers(db_session, admin_user)


@pytest.fixture(scope="function")
def hr_headers(db_session: Session, hr_user: User) -> Dict[str, str]:
    return auth_headers(db_session, hr_user)


@pytest.fixture(scope="function")
def employee_headers(db_session: Session, employee_user: User) -> Dict[str, str]:
    return auth_headers(db_session, employee_user)


@pytest.fixture(scope="function")
def outsider_headers(db_session: Session, outsider_user: User) -> Dict[str, str]:
    return auth_headers(db_session, outsider_user)


@pytest.fixture(scope="function")
def system_admin_headers(db_session: Session, system_admin: User) -> Dict[str, str]:
    return auth_headers(db_session, system_admin)


# ============================================================================
# Organisation
# ============================================================================

@pytest.fixture(scope="function")
def org_setup(
    db_session: Session,
    admin_user: User,
    hr_user: User,
    employee_user: User,
) -> OrgSetup:
    """Organisation "acme" with active admin, HR and employee members."""
    organisation, admin_member = OrganisationService(db_session).create(
        OrganisationCreate(name="Acme Inc", slug="acme", country="Portugal", address=None),
        admin_user,
    )
    hr_member = add_member(
        db_session, organisation, admin_user, hr_user.name, hr_user.email,
        role=MemberRole.HR, user=hr_user,
    )
    employee_member = add_member(
        db_session, organisation, admin_user, employee_user.name, employee_user.email,
        role=MemberRole.EMPLOYEE, user=employee_user,
    )
    return OrgSetup(
        organisation=organisation,
        admin_member=admin_member,
        hr_member=hr_member,
        employee_member=employee_member,
    )


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def user_factory(db_session: Session):
    """Create extra users: ``user_factory("Name", "email")``."""
    def _create(name: str, email: str, role: str = SystemRole.USER.value) -> User:
        return create_user(db_session, name, email, role)
    return _create


@pytest.fixture
def headers_for(db_session: Session):
    """Authorization header for any user: ``headers_for(user)``."""
    def _headers(user: User) -> Dict[str, str]:
        return auth_headers(db_session, user)
    return _headers


@pytest.fixture
def member_factory(db_session: Session):
    """Add a member: ``member_factory(org, actor, "Name", "email", role=..., user=...)``."""
    def _create(organisation: Organisation, actor: User, name: str, email: str, **kwargs) -> Member:
        return add_member(db_session, organisation, actor, name, email, **kwargs)
    return _create


@pytest.fixture
def other_org_setup(db_session: Session, outsider_user: User, member_factory) -> OrgSetup:
    """Second organisation "globex" owned by the outsider, with its own HR and employee."""
    organisation, admin_member = OrganisationService(db_session).create(
        OrganisationCreate(name="Globex", slug="globex", country="Spain", address=None),
        outsider_user,
    )
    hr_member = member_factory(
        organisation, outsider_user, "Gina Hr", "gina@globex.io", role=MemberRole.HR,
    )
    employee_member = member_factory(
        organisation, outsider_user, "Gus Employee", "gus@globex.io",
    )
    return OrgSetup(
        organisation=organisation,
        admin_member=admin_member,
        hr_member=hr_member,
        employee_member=employee_member,
    )
