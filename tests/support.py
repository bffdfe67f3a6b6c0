"""Shared helpers: in-memory database, seeded administrators and a wired TestClient."""

import unittest
from datetime import timedelta
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import hash_password
from app.models import Administrator, Base
from app.services.auth import AuthConfig, get_auth_config
from app.services.blob_storage import get_blob_client

SECRET = "test-secret"
OWNER_PASSWORD = "Owner#Pass1"
ADMIN_PASSWORD = "Admin#Pass1"


def auth_config(**overrides: object) -> AuthConfig:
    values: dict[str, object] = {
        "token_secret": SECRET,
        "owner_id": 1,
        "owner_email": None,
        "token_ttl": timedelta(hours=24),
        "label_field": "email",
    }
    values.update(overrides)
    return AuthConfig(**values)


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_admin(session: Session, username: str, email: str, password: str) -> Administrator:
    admin = Administrator(
        username=username, email=email, password_hash=hash_password(password)
    )
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


class DatabaseTestCase(unittest.TestCase):
    """Fresh SQLite database per test with the Owner (id 1) and one admin (id 2)."""

    def setUp(self) -> None:
        # Low bcrypt cost keeps hashing fast in tests.
        rounds = patch("app.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        self.Session = make_session_factory()
        self.db = self.Session()
        self.addCleanup(self.db.close)
        self.owner = add_admin(self.db, "owner", "owner@catalog.io", OWNER_PASSWORD)
        self.admin = add_admin(self.db, "staff", "staff@catalog.io", ADMIN_PASSWORD)

    def fetch_admin(self, admin_id: int) -> Administrator:
        """Read a row through a separate session so no identity-map state leaks in."""
        with self.Session() as other:
            return other.get(Administrator, admin_id)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient with DB, auth config and blob client overridden."""

    config = auth_config()

    def blob_handler(self, request: httpx.Request) -> httpx.Response:
        self.blob_requests.append(request)
        if request.method == "PUT":
            return httpx.Response(200, json={"url": f"https://blob.test/{request.url.path.lstrip('/')}"})
        return httpx.Response(200, json={})

    def setUp(self) -> None:
        super().setUp()
        from app.main import app

        self.blob_requests: list[httpx.Request] = []
        self.settings = Settings(
            _env_file=None,
            DATABASE_URL="sqlite://",
            BLOB_API_URL="https://blob.test",
            BLOB_READ_WRITE_TOKEN="blob-token",
        )

        def override_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        async def override_blob_client():
            transport = httpx.MockTransport(self.blob_handler)
            async with httpx.AsyncClient(transport=transport) as client:
                yield client

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_auth_config] = lambda: self.config
        app.dependency_overrides[get_blob_client] = override_blob_client
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def login(self, identifier: str, password: str) -> httpx.Response:
        return self.client.post(
            "/api/auth/login", json={"identifier": identifier, "password": password}
        )

    def token_for(self, identifier: str, password: str) -> str:
        resp = self.login(identifier, password)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]

    def owner_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token_for('owner@catalog.io', OWNER_PASSWORD)}"}

    def admin_headers(self) -> dict[str, str]:
        return {"x-access-token": self.token_for("staff@catalog.io", ADMIN_PASSWORD)}
