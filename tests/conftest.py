"""
Test Configuration and Fixtures
Shared testing infrastructure for MedStock
"""

import os

# Settings are read at import time; point them at throwaway SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from datetime import date, timedelta
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from medstock.main import app
from medstock.core.database import get_db, Base
from medstock.models.auth import User
from medstock.services.auth_service import AuthService

import medstock.models  # noqa: F401

# Test database - in-memory SQLite shared across connections
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpassword123"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> User:
    """Create a test user"""
    return AuthService(db_session).create_user("testuser", TEST_PASSWORD)


@pytest.fixture
def auth_headers(client: TestClient, test_user: User) -> Dict[str, str]:
    """Get authentication headers for test user"""
    login_data = {
        "username": test_user.username,
        "password": TEST_PASSWORD
    }

    response = client.post("/api/v1/auth/login", data=login_data)
    assert response.status_code == 200

    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_medication_data() -> Dict[str, Any]:
    """Sample medication lot far from expiry"""
    return {
        "name": "Amoxicillin 500mg",
        "lot": "AMX-001",
        "quantity": 50,
        "expiration_date": date.today() + timedelta(days=365),
        "minimum_stock": 10,
    }


# Database test helpers
class DatabaseTestHelper:
    """Helper class for database operations in tests"""

    @staticmethod
    def count_records(db_session: Session, model_class) -> int:
        """Count records in a table"""
        return db_session.query(model_class).count()


# API test helpers
class APITestHelper:
    """Helper class for API testing"""

    @staticmethod
    def assert_error_response(response, expected_status: int, expected_detail: str = None):
        """Assert error response format"""
        assert response.status_code == expected_status
        data = response.json()
        assert "detail" in data
        if expected_detail:
            assert expected_detail in data["detail"]
