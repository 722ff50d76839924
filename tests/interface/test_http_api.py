"""HTTP contract of POST /v1/rag_chat and GET /health."""

from collections.abc import Sequence

import pytest
from fastapi.testclient import TestClient

from museum_guide.application.ports.llm_port import ChatMessage, LLMResponse
from museum_guide.config.compose import Container
from museum_guide.config.settings import AppSettings
from museum_guide.domain.errors import EmbeddingError
from museum_guide.domain.models import MuseumFacts, Passage
from museum_guide.domain.services.relevance import NO_CONTEXT_REFUSAL, TIME_SENSITIVE_REFUSAL
from museum_guide.infrastructure.passages.memory_store import (
    InMemoryMuseumFacts,
    InMemoryPassageStore,
)
from museum_guide.interface.http.api import create_app

MUSEUM_ID = "0b6f1c3e-7a2d-4c1e-9f3a-2d4b6c8e0a1f"
OTHER_ID = "5d3c2b1a-9e8f-4a7b-8c6d-1e2f3a4b5c6d"


class KeywordEmbedding:
    """Maps a question to an axis by keyword so cosine scores are predictable."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    def embed_query(self, text: str) -> list[float]:
        if self.fail:
            raise EmbeddingError("Embeddings failed: 401 invalid api key")
        if "dinosaur" in text.lower():
            return [1.0, 0.0, 0.0]
        return [0.0, 0.0, 1.0]

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        return [self.embed_query(t) for t in texts]


class EchoLLM:
    def __init__(self) -> None:
        self.calls = 0

    def chat(self, messages: Sequence[ChatMessage], temperature=0.2, max_tokens=512):
        self.calls += 1
        return LLMResponse(text="  The dinosaur hall is on the second floor.  ")


def make_container(settings: AppSettings | None = None, embedding=None) -> Container:
    c = Container(
        settings or AppSettings(openai_api_key="sk-test", passage_backend="memory")
    )
    c._embedding = embedding or KeywordEmbedding()
    c._llm = EchoLLM()
    c._passages = InMemoryPassageStore()
    c._passages.add(
        [
            Passage(
                id="c1",
                tenant_id=MUSEUM_ID,
                text="The dinosaur hall is on the second floor.",
                source_url="https://www.example-museum.org/visit",
                embedding=(0.9, 0.1, 0.0),
            ),
            Passage(
                id="x1",
                tenant_id=OTHER_ID,
                text="Another museum's secret.",
                embedding=(0.0, 0.0, 1.0),
            ),
        ]
    )
    c._facts = InMemoryMuseumFacts(
        {MUSEUM_ID: MuseumFacts(id=MUSEUM_ID, founded_year=1869, website="https://example.org")}
    )
    return c


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(make_container()))


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "service": "museum-guide"}


def test_grounded_answer(client):
    resp = client.post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "Where are the dinosaurs?"}
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["answer"] == "The dinosaur hall is on the second floor."
    assert [s["id"] for s in body["sources"]] == ["c1"]
    assert body["sources"][0]["source_url"] == "https://www.example-museum.org/visit"


def test_profile_answer(client):
    resp = client.post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "When was the museum founded?"}
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "answer": "The museum was founded in 1869.",
        "sources": [
            {"id": f"museum_profile:{MUSEUM_ID}", "source_url": "https://example.org", "similarity": 1.0}
        ],
    }


def test_refusals_are_successful_responses(client):
    resp = client.post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "Is the cafe open today?"}
    )
    assert resp.status_code == 200
    assert resp.json() == {"answer": TIME_SENSITIVE_REFUSAL, "sources": []}

    # The other tenant's passage is the closest vector but must not be seen
    resp = client.post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "Tell me a secret"}
    )
    assert resp.json() == {"answer": NO_CONTEXT_REFUSAL, "sources": []}


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"question": "hi"}, "Invalid or missing museum_id"),
        ({"museum_id": "not-a-uuid", "question": "hi"}, "Invalid or missing museum_id"),
        ({"museum_id": 12345, "question": "hi"}, "Invalid or missing museum_id"),
        ({"museum_id": MUSEUM_ID + "\n", "question": "hi"}, "Invalid or missing museum_id"),
        ({"museum_id": MUSEUM_ID, "question": 42}, "Missing question"),
        ({"museum_id": MUSEUM_ID}, "Missing question"),
        ({"museum_id": MUSEUM_ID, "question": "   "}, "Missing question"),
    ],
)
def test_validation_errors(client, payload, message):
    resp = client.post("/v1/rag_chat", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}


@pytest.mark.parametrize("match_count", ["five", 2.5, True, None, -1, [3]])
def test_unusable_match_count_falls_back_to_default(client, match_count):
    resp = client.post(
        "/v1/rag_chat",
        json={
            "museum_id": MUSEUM_ID,
            "question": "Where are the dinosaurs?",
            "match_count": match_count,
        },
    )
    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()["sources"]] == ["c1"]


def test_body_that_is_not_an_object(client):
    resp = client.post("/v1/rag_chat", json=["not", "an", "object"])
    body = resp.json()
    assert resp.status_code == 400
    assert body["error"] == "Invalid request body"
    assert "detail" in body


def test_upstream_failure_is_500_with_detail():
    app = create_app(make_container(embedding=KeywordEmbedding(fail=True)))
    resp = TestClient(app).post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "Where are the dinosaurs?"}
    )
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal server error"
    assert "invalid api key" in body["detail"]


def test_missing_credentials_is_configuration_error():
    settings = AppSettings(openai_api_key="", passage_backend="memory")
    resp = TestClient(create_app(make_container(settings))).post(
        "/v1/rag_chat", json={"museum_id": MUSEUM_ID, "question": "dinosaurs"}
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Server configuration error"}
