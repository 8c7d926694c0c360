"""
Shared fixtures: an in-memory SQLite database wired into the FastAPI app.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from act_prep.database import Base, get_db
from act_prep.main import app
from act_prep.schemas.attempts import TestAttempt

BASE_TIME = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_attempt():
    """Factory for TestAttempt records, one hour apart by default."""
    counter = {"n": 0}

    def _make(score, total=10, **overrides):
        n = counter["n"]
        counter["n"] += 1
        fields = {
            "id": f"attempt-{n}",
            "user_id": "user-1",
            "session_id": "session-1",
            "passage_id": "passage-1",
            "score": score,
            "total_questions": total,
            "time_spent": 300,
            "completed_at": BASE_TIME + timedelta(hours=n),
        }
        fields.update(overrides)
        return TestAttempt(**fields)

    return _make


@pytest.fixture
def reading_passage_payload():
    return {
        "id": "reading-1",
        "title": "The Lighthouse Keeper",
        "content": "For forty years the light had turned...",
        "subject": "Reading",
        "difficulty": "Hard",
        "passage_type": "prose-fiction",
        "questions": [
            {"id": "q1", "question_number": 1, "correct_answer": "A", "question_type": "detail"},
            {"id": "q2", "question_number": 2, "correct_answer": "B", "question_type": "inference"},
            {"id": "q3", "question_number": 3, "correct_answer": "C", "question_type": "inference"},
            {"id": "q4", "question_number": 4, "correct_answer": "D", "question_type": "tone"},
        ],
    }
