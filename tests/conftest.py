"""Pytest configuration and fixtures."""

import os
import tempfile

# Must be set before app modules read settings
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="account_service_uploads_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models.user import User  # noqa: F401
from app.services.account import AccountService
from app.services.jwt import JWTService
from app.services.notifier import ResetNotifier
from app.services.password import PasswordHasher

TEST_SECRET = "test-secret-key"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="jwt_service")
def jwt_service_fixture() -> JWTService:
    return JWTService(secret_key=TEST_SECRET)


@pytest.fixture(name="hasher")
def hasher_fixture() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture(name="account_service")
def account_service_fixture(hasher: PasswordHasher, jwt_service: JWTService) -> AccountService:
    return AccountService(
        hasher=hasher,
        jwt_service=jwt_service,
        notifier=ResetNotifier("http://testserver/reset-password"),
    )


@pytest.fixture(name="client")
def client_fixture(db_session: Session, account_service: AccountService, jwt_service: JWTService, monkeypatch):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Route handlers and the auth dependency share the fixture services
    monkeypatch.setattr("app.services.account._account_service", account_service)
    monkeypatch.setattr("app.services.jwt._jwt_service", jwt_service)

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, account_service: AccountService):
    """Create a test user and return its data with a session token."""
    result = account_service.register(
        db_session,
        email="test@example.com",
        password="password123",
        name="Test User",
        username="tester",
    )

    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "username": result.user.username,
        "token": result.token,
    }


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(test_user: dict) -> dict:
    return {"Authorization": f"Bearer {test_user['token']}"}
