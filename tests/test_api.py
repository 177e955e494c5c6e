"""
Tests for the HTTP surface

Tests cover:
- Starting a session and walking it to completion
- Retake and progress persistence through redis
- Session errors and the simulate route
"""

import logging

import pytest
from fastapi.testclient import TestClient

from javaquiz import main
from javaquiz.catalog import BUILTIN_QUESTIONS
from javaquiz.config import settings
from javaquiz.models import Question
from javaquiz.redis_session import SESSION_KEY_PREFIX, get_redis
from javaquiz.simulator import MISSING_ENTRY_POINT


@pytest.fixture
def client(fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "PROGRESS_BACKEND", "redis")
    monkeypatch.setattr(
        main.catalog, "questions", [Question(**q) for q in BUILTIN_QUESTIONS]
    )
    main.app.dependency_overrides[get_redis] = lambda: fake_redis
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def start(client, level="Beginner", topic="Syntax"):
    return client.post("/start", data={"level": level, "topic": topic})


def answer_all(client, correct=True):
    state = client.get("/api/quiz").json()
    correct_by_text = {q["text"]: q["correct_answer"] for q in BUILTIN_QUESTIONS}
    while not state["completed"]:
        question = state["question"]
        if correct:
            answer = correct_by_text[question["text"]]
        else:
            answer = "definitely wrong"
        client.post("/select_answer", data={"answer": answer})
        state = client.post("/advance").json()
    return state


class TestSessionFlow:
    """Walking through a quiz over HTTP."""

    def test_start_returns_first_question(self, client):
        response = start(client)
        assert response.status_code == 200
        data = response.json()
        assert data["quiz_id"] == "Beginner-Syntax"
        assert data["phase"] == "InProgress"
        assert data["current_index"] == 0
        assert data["total_questions"] == 5
        assert data["question"]["id"] == "b-syn-1"
        assert data["correct_answer"] is None

    def test_select_answer_reveals_explanation(self, client):
        start(client)
        data = client.post("/select_answer", data={"answer": "final"}).json()
        assert data["phase"] == "AnswerShown"
        assert data["score"] == 1
        assert data["correct_answer"] == "final"
        assert data["explanation"].startswith("A final variable")

    def test_state_persists_between_requests(self, client):
        start(client)
        client.post("/select_answer", data={"answer": "final"})
        client.post("/advance")
        data = client.get("/api/quiz").json()
        assert data["current_index"] == 1
        assert data["score"] == 1
        assert data["progress"] == pytest.approx(0.2)

    def test_advance_before_answer_is_ignored(self, client):
        start(client)
        data = client.post("/advance").json()
        assert data["current_index"] == 0

    def test_full_run_saves_progress(self, client):
        start(client)
        state = answer_all(client)
        assert state["phase"] == "Completed"
        assert state["score"] == 5

        result = client.get("/api/result").json()
        assert result["correct_count"] == 5
        assert result["score_percentage"] == 100
        assert result["saved_score"] == 5
        assert len(result["answers"]) == 5

        progress = client.get("/api/progress").json()
        assert progress["scores"] == {"Beginner-Syntax": 5}
        assert progress["last_accessed_date"] is not None

    def test_retake_overwrites_progress(self, client):
        start(client)
        answer_all(client, correct=True)

        data = client.post("/retake").json()
        assert data["score"] == 0
        assert data["current_index"] == 0
        assert data["completed"] is False

        answer_all(client, correct=False)
        progress = client.get("/api/progress").json()
        assert progress["scores"] == {"Beginner-Syntax": 0}

    def test_start_logs_level_and_topic(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="javaquiz"):
            start(client, level="Intermediate", topic="Collections")
        assert "[Level: Intermediate, Topic: Collections, Questions: 3]" in caplog.text

    def test_unknown_topic_starts_empty_session(self, client):
        data = start(client, topic="Generics").json()
        assert data["question"] is None
        assert data["total_questions"] == 0
        assert data["progress"] == 0.0
        assert data["quiz_id"] == "unknown-quiz"


class TestErrors:
    """Invalid input and missing sessions."""

    def test_unknown_level(self, client):
        response = start(client, level="Expert")
        assert response.status_code == 400

    def test_quiz_without_session(self, client):
        assert client.get("/api/quiz").status_code == 401
        assert client.post("/advance").status_code == 401
        assert client.get("/api/result").status_code == 401

    def test_reset_clears_session(self, client, fake_redis):
        start(client)
        assert len(fake_redis.data) == 1
        assert next(iter(fake_redis.data)).startswith(SESSION_KEY_PREFIX)
        assert client.post("/api/reset").json() == {"status": "success"}
        assert fake_redis.data == {}


class TestCatalogAndSimulator:
    """Read-only routes."""

    def test_topics(self, client):
        topics = client.get("/api/topics").json()
        assert {"id": "Beginner-Syntax", "level": "Beginner", "topic": "Syntax", "count": 5} in topics

    def test_simulate(self, client):
        response = client.post("/simulate", data={"source": "int x = 1;"})
        assert response.json() == {"output": MISSING_ENTRY_POINT}
