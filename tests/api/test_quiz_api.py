"""
API tests for /health, /api/questions and /api/game.
The quiz service is injected through dependency overrides; no lifespan,
no credentials, no Redis.
"""

import json
import random

import pytest
from fastapi.testclient import TestClient

from quizgen.core.extractor import ExtractionOptions, StructuredExtractor
from quizgen.main import app
from quizgen.routers.quiz import GENERATION_FAILED_MESSAGE, get_quiz_service
from quizgen.services.quiz_service import QuizService

OPEN_ENDED = [
    {"question": "What is the powerhouse of the cell?", "answer": "Mitochondria"},
    {"question": "What carries genetic information?", "answer": "DNA"},
]
MCQ = [
    {"question": "Which organelle makes proteins?", "answer": "Ribosome",
     "option1": "Nucleus", "option2": "Golgi apparatus", "option3": "Lysosome"},
]


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def use_responses(make_generator, memory_store):
    """Install a quiz service backed by scripted model responses."""
    def _install(responses):
        generator = make_generator(responses)
        extractor = StructuredExtractor(generator, default_model="m", default_options=ExtractionOptions())
        service = QuizService(extractor, memory_store, rng=random.Random(0))
        app.dependency_overrides[get_quiz_service] = lambda: service
        return generator

    yield _install
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"]


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_service_not_initialized_returns_500(client):
    response = client.post("/api/questions", json={"topic": "biology", "type": "open_ended", "amount": 2})
    assert response.status_code == 500


class TestQuestions:

    def test_generates_open_ended_questions(self, client, use_responses):
        use_responses([json.dumps(OPEN_ENDED)])

        response = client.post("/api/questions", json={"topic": "biology", "type": "open_ended", "amount": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["questions"] == OPEN_ENDED
        assert body["error"] is None

    def test_generates_mcq_questions(self, client, use_responses):
        use_responses([json.dumps(MCQ)])

        response = client.post("/api/questions", json={"topic": "biology", "type": "mcq", "amount": 1})

        assert response.status_code == 200
        assert response.json()["questions"] == MCQ

    def test_too_many_questions_rejected(self, client, use_responses):
        generator = use_responses([json.dumps(OPEN_ENDED)])

        response = client.post("/api/questions", json={"topic": "biology", "type": "mcq", "amount": 11})

        assert response.status_code == 400
        assert generator.calls == []

    @pytest.mark.parametrize("payload", [
        {"topic": "ab", "type": "mcq", "amount": 2},
        {"topic": "biology", "type": "essay", "amount": 2},
        {"topic": "biology", "type": "mcq", "amount": 0},
        {"type": "mcq", "amount": 2},
    ])
    def test_invalid_body_rejected(self, client, use_responses, payload):
        use_responses([json.dumps(OPEN_ENDED)])
        assert client.post("/api/questions", json=payload).status_code == 422

    def test_generation_failure_degrades_gracefully(self, client, use_responses):
        generator = use_responses(["Sorry, I can't do that."])

        response = client.post("/api/questions", json={"topic": "biology", "type": "open_ended", "amount": 2})

        assert response.status_code == 200
        assert response.json() == {"questions": [], "error": GENERATION_FAILED_MESSAGE}
        assert len(generator.calls) == 3


class TestGame:

    def test_create_and_fetch_game(self, client, use_responses):
        use_responses([json.dumps(MCQ)])

        created = client.post("/api/game", json={"topic": "biology", "type": "mcq", "amount": 1})
        assert created.status_code == 200
        game_id = created.json()["gameId"]

        fetched = client.get(f"/api/game/{game_id}")
        assert fetched.status_code == 200
        game = fetched.json()["game"]
        assert game["topic"] == "biology"
        assert game["game_type"] == "mcq"
        assert sorted(game["questions"][0]["options"]) == sorted(
            ["Nucleus", "Golgi apparatus", "Lysosome", "Ribosome"]
        )

    def test_blank_topic_rejected(self, client, use_responses):
        use_responses([json.dumps(MCQ)])
        response = client.post("/api/game", json={"topic": "      ", "type": "mcq", "amount": 1})
        assert response.status_code == 400

    def test_unknown_game_is_404(self, client, use_responses):
        use_responses([json.dumps(MCQ)])
        assert client.get("/api/game/does-not-exist").status_code == 404

    def test_topic_counts(self, client, use_responses):
        use_responses([json.dumps(MCQ)])
        client.post("/api/game", json={"topic": "biology", "type": "mcq", "amount": 1})
        client.post("/api/game", json={"topic": "biology", "type": "mcq", "amount": 1})

        response = client.get("/api/topics")

        assert response.status_code == 200
        assert response.json() == {"topics": {"biology": 2}}

    def test_generation_failure_is_502(self, client, use_responses):
        use_responses(["not json"])
        response = client.post("/api/game", json={"topic": "biology", "type": "mcq", "amount": 1})
        assert response.status_code == 502
        assert response.json()["error"] == GENERATION_FAILED_MESSAGE
