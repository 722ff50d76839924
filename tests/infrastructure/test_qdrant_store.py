import sys
import types
from types import SimpleNamespace
from typing import Any

import pytest

from museum_guide.domain.errors import VectorStoreError
from museum_guide.infrastructure.passages.qdrant_store import QdrantConfig, QdrantPassageStore

MUSEUM_ID = "0b6f1c3e-7a2d-4c1e-9f3a-2d4b6c8e0a1f"
OTHER_ID = "5d3c2b1a-9e8f-4a7b-8c6d-1e2f3a4b5c6d"


@pytest.fixture
def fake_models(monkeypatch):
    models = types.ModuleType("qdrant_client.models")

    class Filter:
        def __init__(self, must):
            self.must = must

    class FieldCondition:
        def __init__(self, key, match):
            self.key = key
            self.match = match

    class MatchValue:
        def __init__(self, value):
            self.value = value

    models.Filter = Filter
    models.FieldCondition = FieldCondition
    models.MatchValue = MatchValue
    monkeypatch.setitem(sys.modules, "qdrant_client.models", models)
    return models


class FakeQdrant:
    def __init__(self, points: list[Any], fail: bool = False) -> None:
        self.points = points
        self.fail = fail
        self.calls: list[dict[str, Any]] = []

    def query_points(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.fail:
            raise RuntimeError("connection reset")
        return SimpleNamespace(points=self.points)

    def retrieve(self, **kwargs: Any) -> list[Any]:
        self.calls.append(kwargs)
        return self.points


def point(id_: str, museum: str, score: float, url: str | None = None) -> SimpleNamespace:
    payload = {"museum_id": museum, "text": f"text {id_}", "source_url": url}
    return SimpleNamespace(id=id_, score=score, payload=payload)


def test_match_sends_tenant_filter(fake_models) -> None:
    client = FakeQdrant([point("p1", MUSEUM_ID, 0.77, "https://x.org")])
    store = QdrantPassageStore(QdrantConfig(url="http://qdrant", collection="chunks"), client)

    rows = store.match(MUSEUM_ID, (0.1, 0.2), 7)

    call = client.calls[0]
    assert call["collection_name"] == "chunks"
    assert call["limit"] == 7
    assert call["query"] == [0.1, 0.2]
    cond = call["query_filter"].must[0]
    assert cond.key == "museum_id"
    assert cond.match.value == MUSEUM_ID
    assert [(r.id, r.similarity, r.source_url) for r in rows] == [("p1", 0.77, "https://x.org")]


def test_match_drops_foreign_points(fake_models) -> None:
    client = FakeQdrant([point("p1", OTHER_ID, 0.99), point("p2", MUSEUM_ID, 0.5)])
    store = QdrantPassageStore(QdrantConfig(url="http://qdrant"), client)

    assert [r.id for r in store.match(MUSEUM_ID, [1.0], 5)] == ["p2"]


def test_match_failure(fake_models) -> None:
    store = QdrantPassageStore(QdrantConfig(url="http://qdrant"), FakeQdrant([], fail=True))
    with pytest.raises(VectorStoreError, match="connection reset"):
        store.match(MUSEUM_ID, [1.0], 5)


def test_source_urls_scoped(fake_models) -> None:
    client = FakeQdrant([point("p1", MUSEUM_ID, 0.0, "https://a"), point("p2", OTHER_ID, 0.0, "https://b")])
    store = QdrantPassageStore(QdrantConfig(url="http://qdrant"), client)

    assert store.source_urls(MUSEUM_ID, ["p1", "p2"]) == {"p1": "https://a"}
