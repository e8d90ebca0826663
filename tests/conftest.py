"""
Test Configuration and Fixtures

Every test runs against a fresh in-memory SQLite schema through the real
FastAPI application. Helpers register, verify and log in users over HTTP.
"""

import os
import tempfile
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "warning")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="jobboard-uploads-"))

PASSWORD = "Passw0rd!"
PDF_BYTES = b"%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "api: API endpoint tests")


# =============================================================================
# DATABASE / CLIENT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table so tests never share rows."""
    from app import models  # noqa: F401
    from app.db.postgres import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    from app.db.postgres import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from app.main import app as fastapi_app

    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


# =============================================================================
# USER HELPERS
# =============================================================================


class ApiUser(dict):
    """Registered and logged in user: id, username, token."""

    @property
    def id(self) -> int:
        return self["id"]

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self['token']}"}


class Api:
    def __init__(self, client: TestClient):
        self.client = client

    def register(self, username: str, role: str = "ROLE_JOBSEEKER", email: Optional[str] = None):
        return self.client.post("/api/auth/register", json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": PASSWORD,
            "role": role,
            "first_name": username.capitalize(),
            "last_name": "Tester",
        })

    def verification_token(self, username: str) -> str:
        from app.db.postgres import SessionLocal
        from app.models import AuthToken, User
        from app.models.enums import TokenPurpose

        with SessionLocal() as db:
            token = (
                db.query(AuthToken)
                .join(User, AuthToken.user_id == User.id)
                .filter(User.username == username, AuthToken.purpose == TokenPurpose.VERIFY_EMAIL)
                .order_by(AuthToken.id.desc())
                .first()
            )
            return token.token

    def login(self, username: str, password: str = PASSWORD):
        return self.client.post("/api/auth/login", json={"username": username, "password": password})

    def user(self, username: str, role: str = "ROLE_JOBSEEKER") -> ApiUser:
        """Register, verify and log in. Returns the logged in user."""
        assert self.register(username, role).status_code == 201
        token = self.verification_token(username)
        assert self.client.post("/api/auth/verify-email", json={"token": token}).status_code == 200
        body = self.login(username).json()
        return ApiUser(id=body["user_id"], username=username, token=body["access_token"])

    def employer(self, username: str) -> ApiUser:
        return self.user(username, "ROLE_EMPLOYER")

    def admin(self, username: str = "admin") -> ApiUser:
        """Admins cannot self-register; insert one directly."""
        from app.core.auth import hash_password
        from app.db.postgres import SessionLocal
        from app.models import User
        from app.models.enums import Role

        with SessionLocal() as db:
            db.add(User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(PASSWORD),
                role=Role.ROLE_ADMIN,
                email_verified=True,
            ))
            db.commit()
        body = self.login(username).json()
        return ApiUser(id=body["user_id"], username=username, token=body["access_token"])

    def workplace(self, owner: ApiUser, name: str = "Acme Ethics", tags=None) -> dict:
        response = self.client.post("/api/workplace", headers=owner.headers, json={
            "company_name": name,
            "sector": "Software",
            "location": "Berlin",
            "short_description": "We build things",
            "ethical_tags": tags if tags is not None else ["SALARY_TRANSPARENCY", "REMOTE_FRIENDLY"],
        })
        assert response.status_code == 201, response.text
        return response.json()

    def job(self, employer: ApiUser, workplace_id: int, **overrides) -> dict:
        payload = {
            "workplace_id": workplace_id,
            "title": "Backend Engineer",
            "description": "Python and SQL",
            "remote": True,
            "location": "Berlin",
            "ethical_tags": ["fair pay"],
            "min_salary": 50000,
            "max_salary": 70000,
        }
        payload.update(overrides)
        response = self.client.post("/api/jobs", headers=employer.headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()


@pytest.fixture
def api(client) -> Api:
    return Api(client)
