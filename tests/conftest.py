"""
Test configuration and fixtures
"""
import os

# Configure before any application module reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MAIL_BACKEND", "console")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database.connection import Base, get_db
from models.admin import Admin, Role
from services.notifications import NotificationDispatcher, get_dispatcher
from utils.auth import create_admin_token

from main import app

# Test database (file-based SQLite so the notification workers share it with the request session)
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    echo=False  # Set to True to debug SQL
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeMailer:
    """Records messages instead of sending them, can be told to fail"""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.fail_for = set()

    def send(self, to, subject, html=None, text=None):
        if self.fail or to in self.fail_for:
            raise ConnectionError(f"SMTP connection to send to {to} refused")
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})


@pytest.fixture
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def dispatcher(mailer):
    return NotificationDispatcher(session_factory=TestingSessionLocal, mailer=mailer, max_workers=4)


@pytest.fixture
def client(db_session, dispatcher):
    """Create a test client with test database and a recording mailer"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(admin):
    return {"Authorization": f"Bearer {create_admin_token(admin.id, admin.role.value)}"}


@pytest.fixture
def make_admin(db_session):
    def _make_admin(email, role=Role.EVENT_ADMIN, password="Passw0rd!", name=None):
        admin = Admin(
            name=name or email.split("@")[0],
            email=email,
            password_hash=Admin.hash_password(password),
            role=role
        )
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin
    return _make_admin


@pytest.fixture
def admin(make_admin):
    return make_admin("owner@example.com")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def other_admin_headers(make_admin):
    return auth_headers(make_admin("other@example.com"))


@pytest.fixture
def super_admin_headers(make_admin):
    return auth_headers(make_admin("root@example.com", role=Role.SUPER_ADMIN))


@pytest.fixture
def create_event(client, admin_headers):
    """Create an event through the API, owned by the default admin unless headers are given"""
    def _create_event(purpose="Demo Day", headers=None, **fields):
        response = client.post("/events", json={"purpose": purpose, **fields}, headers=headers or admin_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create_event


@pytest.fixture
def register_user(client):
    def _register_user(event_code, email="alice@example.com", name="Alice", password="secret"):
        return client.post("/users/register", json={
            "name": name,
            "email": email,
            "password": password,
            "eventCode": event_code
        })
    return _register_user
