"""Shared fixtures: in-memory SQLite database and a TestClient wired to it."""

import unittest
from collections.abc import Generator
from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import build_engine, get_db
from app.main import app
from app.models import Base, InviteCode
from app.models.user import ROLE_ADMIN
from app.services.credentials import create_user


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables; one shared connection so every session sees it."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_invite_code(
    factory: sessionmaker,
    code: str,
    *,
    used: bool = False,
    expires_at: datetime | None = None,
) -> int:
    with factory() as db:
        row = InviteCode(code=code, used=used, expires_at=expires_at)
        db.add(row)
        db.commit()
        return row.id


class DatabaseTestCase(unittest.TestCase):
    """Service-level tests against a fresh database per test."""

    def setUp(self) -> None:
        self.Session = make_session_factory()
        self.db: Session = self.Session()

    def tearDown(self) -> None:
        self.db.close()


class ApiTestCase(unittest.TestCase):
    """HTTP tests: TestClient with get_db overridden to a fresh database per test."""

    PREFIX = "/api/v1"

    def setUp(self) -> None:
        self.Session = make_session_factory()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def url(self, path: str) -> str:
        return f"{self.PREFIX}{path}"

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def register(self, username: str, password: str, invite_code: str):
        return self.client.post(
            self.url("/auth/register"),
            json={"username": username, "password": password, "inviteCode": invite_code},
        )

    def login(self, username: str, password: str):
        return self.client.post(
            self.url("/auth/login"),
            json={"username": username, "password": password},
        )

    def register_user(self, username: str = "alice", password: str = "secret1", code: str = "CODE01") -> str:
        """Create an invite code, register with it and return the token."""
        add_invite_code(self.Session, code)
        response = self.register(username, password, code)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]

    def admin_token(self, username: str = "root", password: str = "rootpass") -> str:
        with self.Session() as db:
            create_user(db, username, password, role=ROLE_ADMIN)
        response = self.login(username, password)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]
