from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from convocoach.api import get_notifier, get_scorer
from convocoach.db import Base, get_db
from convocoach.main import create_app
from convocoach.services.prompts import FeedbackRequest

GOOD_ANALYSIS = {
    "clarity_score": 7.5,
    "confidence_score": 6.0,
    "empathy_score": 8.0,
    "pacing_score": 7.0,
    "summary": "Clear and friendly.",
    "strengths": ["Warm opening", "Clear ask", "Good pacing"],
    "improvements": ["Fewer fillers", "Pause more", "Summarize at the end"],
    "practice_drill": "Record a 60 second pitch without fillers.",
    "tone_analysis": "Friendly",
    "structure_quality": "Mostly linear",
}


class FakeScorer:
    def __init__(self, response: Dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.response = dict(GOOD_ANALYSIS) if response is None else response
        self.error = error
        self.requests: List[FeedbackRequest] = []

    def score(self, request: FeedbackRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return dict(self.response)


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: List[tuple] = []

    def badge_awarded(self, user_id: str, badge: Any) -> None:
        self.events.append((user_id, badge.id))


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def SessionTesting(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(SessionTesting):
    s = SessionTesting()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def scorer():
    return FakeScorer()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(SessionTesting, scorer, notifier):
    app = create_app(create_tables=False)

    def _get_db():
        s = SessionTesting()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_scorer] = lambda: scorer
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
