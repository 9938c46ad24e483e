"""Tests for api/main.py"""

from pathlib import Path

import pytest
import redis
from fastapi.testclient import TestClient

import api.main as api_main
from redis_store import RedisStore

SAMPLE_BANK = Path(__file__).resolve().parent.parent / "data" / "question_bank.json"

QUESTIONS = [
    {"id": "q1", "prompt": "One?", "options": [{"id": "a", "text": "1"}, {"id": "b", "text": "2"}],
     "correct_option_id": "a", "difficulty": 0.4, "concept": "vectors", "explanation": "It is one."},
    {"id": "q2", "prompt": "Two?", "options": [{"id": "a", "text": "1"}, {"id": "b", "text": "2"}],
     "correct_option_id": "b", "difficulty": 0.5, "concept": "vectors"},
    {"id": "q3", "prompt": "Three?", "options": [{"id": "a", "text": "3"}, {"id": "b", "text": "4"}],
     "correct_option_id": "a", "difficulty": 0.6, "concept": "matrix_ops"},
]


class BrokenRedis:
    """Every call fails like an unreachable server."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.ConnectionError("connection refused")
        return fail


@pytest.fixture
def client(fake_redis, monkeypatch):
    monkeypatch.setattr(api_main, "store", RedisStore(client=fake_redis))
    monkeypatch.setattr(api_main, "sessions", {})
    return TestClient(api_main.app)


def start(client, **overrides):
    body = {"session_id": "s1", "questions": QUESTIONS, "max_questions": 3}
    body.update(overrides)
    response = client.post("/sessions", json=body)
    assert response.status_code == 200
    return response.json()


def correct_option(question_id):
    return next(q["correct_option_id"] for q in QUESTIONS if q["id"] == question_id)


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_full_session_flow(client, fake_redis):
    data = start(client)
    session = data["session"]
    assert session["phase"] == "active"
    assert "correct_option_id" not in session["current_question"]

    # Results are not available until the session completes
    assert client.get("/sessions/s1/results").status_code == 409

    for _ in range(3):
        qid = client.get("/sessions/s1").json()["session"]["current_question"]["id"]
        response = client.post("/sessions/s1/answer",
                               json={"option_id": correct_option(qid), "confidence": 0.9,
                                     "time_spent": 15})
        assert response.status_code == 200
        assert response.json()["is_correct"] is True

    final = client.get("/sessions/s1").json()["session"]
    assert final["phase"] == "complete"
    assert final["score"] == 3

    results = client.get("/sessions/s1/results").json()["results"]
    assert results["score"] == 3
    assert results["summary"]["percent_score"] == 100
    assert len(results["records"]) == 3

    # Completion callback persisted the results
    assert api_main.store.get_session("s1")["state"]["score"] == 3

    assert client.post("/sessions/s1/answer", json={"option_id": "a"}).status_code == 409


def test_wrong_answer_returns_explanation(client):
    start(client, initial_difficulty=0.4, enable_spaced_repetition=True)
    qid = client.get("/sessions/s1").json()["session"]["current_question"]["id"]
    assert qid == "q1"

    response = client.post("/sessions/s1/answer", json={"option_id": "b", "time_spent": 30})
    body = response.json()
    assert body["is_correct"] is False
    assert body["correct_option_id"] == "a"
    assert body["explanation"] == "It is one."
    assert body["session"]["consecutive_incorrect"] == 1


def test_manual_advance_and_duplicate(client):
    start(client, auto_advance=False)
    qid = client.get("/sessions/s1").json()["session"]["current_question"]["id"]

    assert client.post("/sessions/s1/answer", json={"option_id": "a"}).status_code == 200
    assert client.post("/sessions/s1/answer", json={"option_id": "a"}).status_code == 409

    advanced = client.post("/sessions/s1/advance").json()
    assert advanced["advanced"] is True
    assert advanced["session"]["current_question"]["id"] != qid


def test_skip_and_reset(client):
    start(client)
    skipped = client.post("/sessions/s1/skip").json()["session"]
    assert skipped["answered"] == 1
    assert skipped["score"] == 0

    reset = client.post("/sessions/s1/reset").json()["session"]
    assert reset["phase"] == "active"
    assert reset["answered"] == 0


def test_empty_inline_bank_completes(client):
    data = start(client, questions=[])
    assert data["session"]["phase"] == "complete"
    assert client.get("/sessions/s1/results").json()["results"]["score"] == 0
    assert client.post("/sessions/s1/skip").status_code == 409


def test_start_from_configured_file(client, monkeypatch):
    monkeypatch.setenv("QUESTION_BANK_PATH", str(SAMPLE_BANK))
    response = client.post("/sessions", json={"session_id": "file"})
    assert response.status_code == 200
    assert response.json()["session"]["max_questions"] == 10


def test_missing_bank_file(client, monkeypatch, tmp_path):
    monkeypatch.setenv("QUESTION_BANK_PATH", str(tmp_path / "missing.json"))
    assert client.post("/sessions", json={"session_id": "x"}).status_code == 422
    assert client.get("/sessions/x").status_code == 404


def test_request_validation(client):
    start(client)
    assert client.post("/sessions/s1/answer",
                       json={"option_id": "a", "confidence": 2}).status_code == 422
    assert client.post("/sessions", json={"max_questions": -1}).status_code == 422


def test_unknown_session(client):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions/nope/answer", json={"option_id": "a"}).status_code == 404


def test_delete_session(client):
    start(client, max_questions=1)
    client.post("/sessions/s1/skip")
    assert api_main.store.get_session("s1") is not None

    assert client.delete("/sessions/s1").json()["status"] == "deleted"
    assert client.get("/sessions/s1").status_code == 404
    assert api_main.store.get_session("s1") is None


def test_store_outage_does_not_break_quiz(client, monkeypatch):
    monkeypatch.setattr(api_main, "store", RedisStore(client=BrokenRedis()))
    start(client, max_questions=1)

    response = client.post("/sessions/s1/skip")
    assert response.status_code == 200
    assert response.json()["session"]["phase"] == "complete"
    assert client.delete("/sessions/s1").status_code == 200


def test_results_served_from_store_after_restart(client):
    start(client, max_questions=2)
    for _ in range(2):
        qid = client.get("/sessions/s1").json()["session"]["current_question"]["id"]
        client.post("/sessions/s1/answer", json={"option_id": correct_option(qid), "time_spent": 10})
    live = client.get("/sessions/s1/results").json()["results"]

    # Drop the in-memory controller as a restart would
    api_main.sessions.clear()

    stored = client.get("/sessions/s1/results").json()["results"]
    assert stored["score"] == live["score"] == 2
    assert stored["mastery"] == live["mastery"]
    assert stored["records"] == live["records"]
    assert stored["summary"] == live["summary"]
    assert sorted(stored["mastered_concepts"]) == sorted(live["mastered_concepts"])
    assert stored["weak_concepts"] == live["weak_concepts"] == []

    assert client.get("/sessions/never-started/results").status_code == 404


def test_stored_results_unavailable(client, monkeypatch):
    monkeypatch.setattr(api_main, "store", RedisStore(client=BrokenRedis()))
    assert client.get("/sessions/s1/results").status_code == 503


def test_malformed_bank_file(client, monkeypatch, tmp_path):
    bank = tmp_path / "bank.json"
    bank.write_text('[{"id": "q1", "options": [{"text": "x"}]}]')
    monkeypatch.setenv("QUESTION_BANK_PATH", str(bank))
    assert client.post("/sessions", json={"session_id": "x"}).status_code == 422
