"""
Pytest configuration and shared fixtures for InsightStream tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("SENTRY_DSN", "")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-enough-length")

import pytest
from typing import Generator, Dict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import Mock

from insightstream.main import app
from insightstream.database import Base, get_db, init_db
from insightstream.models.user import User, ROLE_ADMIN, ROLE_USER
from insightstream.services.auth_service import AuthService
from insightstream.utils.security import hash_password


# Database setup
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_engine():
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine) -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.
    """
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(test_db: Session) -> TestClient:
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# User fixtures
def _make_user(db: Session, email: str, name: str, role: str, password: str) -> User:
    user = User(email=email, name=name, role=role, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(test_db: Session) -> User:
    """
    Create a regular test user.
    """
    return _make_user(test_db, "test@example.com", "Test User", ROLE_USER, "testpassword123")


@pytest.fixture
def test_user2(test_db: Session) -> User:
    """
    Create a second regular user for isolation tests.
    """
    return _make_user(test_db, "test2@example.com", "Second User", ROLE_USER, "testpassword456")


@pytest.fixture
def admin_user(test_db: Session) -> User:
    """
    Create an admin user.
    """
    return _make_user(test_db, "admin@example.com", "Admin User", ROLE_ADMIN, "adminpassword123")


@pytest.fixture
def auth_headers(test_db: Session, test_user: User) -> Dict[str, str]:
    """
    Authorization header backed by a stored session.
    """
    token = AuthService.create_user_session(test_db, test_user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers2(test_db: Session, test_user2: User) -> Dict[str, str]:
    token = AuthService.create_user_session(test_db, test_user2)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_db: Session, admin_user: User) -> Dict[str, str]:
    token = AuthService.create_user_session(test_db, admin_user)
    return {"Authorization": f"Bearer {token}"}


# Vendor client fixtures
@pytest.fixture
def mock_youtube_client() -> Mock:
    """
    YouTube client returning two videos.
    """
    client = Mock()
    client.get_video_statistics.return_value = [
        {
            "id": "abc123",
            "title": "First Video",
            "description": "First description",
            "thumbnail_url": "https://i.ytimg.com/vi/abc123/hqdefault.jpg",
            "views": 1000,
            "likes": 100,
            "comments": 10,
            "published_at": None,
        },
        {
            "id": "def456",
            "title": "Second Video",
            "description": "",
            "thumbnail_url": "https://i.ytimg.com/vi/def456/hqdefault.jpg",
            "views": 500,
            "likes": 50,
            "comments": 5,
            "published_at": None,
        },
    ]
    client.get_video_comments.return_value = []
    return client


@pytest.fixture
def mock_generative_model() -> Mock:
    """
    Gemini model stub; set `.generate_content.return_value.text` per test.
    """
    model = Mock()
    model.generate_content.return_value = Mock(text="{}")
    return model
