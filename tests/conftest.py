"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker

# Set required environment variables for tests BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("IDENTITY_MODE", "local_header")

from app.config import IdentityMode, Settings
from app.main import create_app
from app.models.database import (
    Base,
    create_connection_lock,
    create_db_engine,
    create_session_factory,
)
from app.schemas.survey import Question, QuestionType, Survey
from app.services.response_store import ResponseStore
from app.services.survey_store import SurveyStore

TEST_JWT_SECRET = "test_jwt_secret_for_testing_only"


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory database with header identities."""
    return Settings(
        database_url="sqlite:///:memory:",
        environment="development",
        identity_mode=IdentityMode.LOCAL_HEADER,
    )


@pytest.fixture
def claims_settings() -> Settings:
    """Settings for an in-memory database with bearer-token identities."""
    return Settings(
        database_url="sqlite:///:memory:",
        environment="development",
        identity_mode=IdentityMode.CLAIMS,
        jwt_secret=TEST_JWT_SECRET,
    )


@pytest.fixture(scope="function")
def db_engine(settings):
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        Database is created fresh for each test function.
    """
    engine = create_db_engine(settings)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> sessionmaker:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
def connection_lock(db_engine):
    """Lock shared by the stores of the test database."""
    return create_connection_lock(db_engine)


@pytest.fixture
def survey_store(session_factory, connection_lock) -> SurveyStore:
    """Survey store on the test database."""
    return SurveyStore(session_factory, connection_lock)


@pytest.fixture
def response_store(session_factory, connection_lock) -> ResponseStore:
    """Response store on the test database."""
    return ResponseStore(session_factory, connection_lock)


@pytest.fixture
def sample_survey() -> Survey:
    """Provide a private, active survey with one required question.

    Returns:
        Survey: Survey owned by "owner-1"
    """
    return Survey(
        survey_id="survey-1",
        title="Team lunch",
        description="Where should we eat?",
        questions=[
            Question(id="q1", text="Your name?", type=QuestionType.TEXT, required=True),
            Question(
                id="q2",
                text="Favourite cuisine?",
                type=QuestionType.MULTIPLE_CHOICE,
                required=False,
                choices=[
                    {"id": "c1", "text": "Thai", "value": "thai"},
                    {"id": "c2", "text": "Pizza", "value": "pizza"},
                ],
            ),
            Question(id="q3", text="Rate the last lunch", type=QuestionType.RATING, required=True),
        ],
        owner_id="owner-1",
        created_at="2026-01-01T00:00:00.000Z",
        updated_at="2026-01-01T00:00:00.000Z",
        is_active=True,
        is_public=False,
        response_count=0,
        settings={"theme": "default"},
    )


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """Test client for an app using header identities.

    Unhandled exceptions are returned as 500 responses instead of being
    re-raised into the test.
    """
    with TestClient(create_app(settings), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def claims_client(claims_settings) -> Generator[TestClient, None, None]:
    """Test client for an app using bearer-token identities."""
    with TestClient(create_app(claims_settings), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def make_token():
    """Return a function that signs a bearer token for a subject."""
    def _make_token(sub: str, secret: str = TEST_JWT_SECRET, **claims) -> str:
        return jwt.encode({"sub": sub, **claims}, secret, algorithm="HS256")
    return _make_token
