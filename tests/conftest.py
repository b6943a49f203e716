"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Bearer tokens for each role
- Local file storage in a temporary directory
"""

import os

# Settings are read at import time; point the app at SQLite before importing it
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("JSON_LOGS", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.core.storage import LocalStorage, get_storage
import app.models  # noqa: F401  Register tables on Base.metadata
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

EMPLOYER_ID = "employer-1"
OTHER_EMPLOYER_ID = "employer-2"
JOB_SEEKER_ID = "seeker-1"


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    """Local storage rooted in a per-test temporary directory"""
    return LocalStorage(str(tmp_path / "uploads"))


@pytest.fixture
def override_dependencies(db_session, storage):
    """
    Point the app's database and storage dependencies at the test fixtures.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_dependencies):
    """
    FastAPI test client with overridden database and storage dependencies.
    """
    with TestClient(app) as test_client:
        yield test_client


def make_token(subject: str, role: str) -> str:
    return create_access_token({"sub": subject, "role": role})


def auth_headers(subject: str, role: str) -> dict:
    return {"Authorization": f"Bearer {make_token(subject, role)}"}


@pytest.fixture
def employer_headers():
    return auth_headers(EMPLOYER_ID, "employer")


@pytest.fixture
def other_employer_headers():
    return auth_headers(OTHER_EMPLOYER_ID, "employer")


@pytest.fixture
def job_seeker_headers():
    return auth_headers(JOB_SEEKER_ID, "job_seeker")


@pytest.fixture
def sample_skill_data():
    """Sample skill data for testing"""
    return {"name": "Go", "category": "Programming Language"}


@pytest.fixture
def sample_job_data():
    """Sample job data for testing"""
    return {
        "title": "Senior Python Developer",
        "description": """
        We are looking for a Senior Python Developer with 5+ years of experience.

        Requirements:
        - Expert knowledge of Python and FastAPI
        - Strong experience with PostgreSQL
        """,
        "location": "San Francisco, CA (Remote)",
    }
