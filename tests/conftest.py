"""Pytest configuration and fixtures."""

import os
import time

# Settings are read once at import time, so the test environment must be in
# place before the application is imported.
os.environ["JWT_SECRET"] = "test-secret-do-not-use-in-production"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("GOOGLE_CLIENT_ID", None)
os.environ.pop("GOOGLE_CLIENT_SECRET", None)
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from wemanage.database import Base, get_db  # noqa: E402
from wemanage.main import app  # noqa: E402
from wemanage.models.enums import UserRole  # noqa: E402
from wemanage.models.user import User  # noqa: E402
from wemanage.services.email import get_mailer  # noqa: E402
from wemanage.services.sessions import RedisSessionStore, get_session_store  # noqa: E402

TEST_PASSWORD = "testpass123"


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeRedis:
    """In-memory stand-in for the few Redis commands the session store uses."""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.expiry: dict[str, int | None] = {}

    def set(self, key, value, ex=None):
        self.data[key] = str(value).encode()
        self.expiry[key] = ex
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed


class RecordingMailer:
    """Mailer that keeps every message instead of sending it."""

    def __init__(self):
        self.sent: list[dict] = []
        self.succeed = True
        self.delay = 0.0

    def send(self, to: str, subject: str, body: str) -> bool:
        if self.delay:
            time.sleep(self.delay)
        self.sent.append({"to": to, "subject": subject, "body": body})
        return self.succeed


SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - each test cleans up after itself


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def session_store(fake_redis):
    return RedisSessionStore(fake_redis, ttl_seconds=3600)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture(scope="function")
def client(db, session_store, mailer):
    """Create a test client with database, session store and mailer overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, name: str = "Test User", password: str = TEST_PASSWORD) -> AuthHeaders:
    """Register a user through the API and return bearer headers for them."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"}, user_id=data["id"], email=data["email"]
    )


@pytest.fixture
def register_user(client):
    """Factory fixture: register another user and get their headers."""

    def _register(email: str, name: str = "Test User", password: str = TEST_PASSWORD):
        return register(client, email, name=name, password=password)

    return _register


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com")


@pytest.fixture
def other_headers(client):
    """A second standard user."""
    return register(client, "other@example.com", name="Other User")


@pytest.fixture
def admin_headers(client, db):
    """Create an administrator and return auth headers for them."""
    headers = register(client, "admin@example.com", name="Admin User")
    user = db.query(User).filter(User.id == headers.user_id).first()
    user.role = UserRole.ADMIN
    db.commit()
    return headers
