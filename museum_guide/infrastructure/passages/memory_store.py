# In-memory passage and fact stores for local runs and tests (no external libs).
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from museum_guide.application.ports.fact_store_port import MuseumFactsPort
from museum_guide.application.ports.passage_store_port import (
    MatchCandidate,
    Passage,
    PassageSearchPort,
    PassageWritePort,
)
from museum_guide.domain.errors import VectorStoreError
from museum_guide.domain.models import MuseumFacts


def _cos_sim(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b, strict=False))
    na = math.sqrt(sum(x * x for x in a)) or 1.0
    nb = math.sqrt(sum(y * y for y in b)) or 1.0
    return dot / (na * nb)


@dataclass
class InMemoryPassageStore(PassageSearchPort, PassageWritePort):
    """Brute-force cosine search; passages of other tenants are skipped before scoring."""

    passages: dict[str, Passage] = field(default_factory=dict)

    def add(self, items: Iterable[Passage]) -> None:
        for p in items:
            self.passages[p.id] = p

    def match(
        self, tenant_id: str, query_vector: Sequence[float], match_count: int
    ) -> list[MatchCandidate]:
        scored: list[tuple[float, Passage]] = []
        for p in self.passages.values():
            if p.tenant_id != tenant_id or p.embedding is None:
                continue
            if len(p.embedding) != len(query_vector):
                raise VectorStoreError(
                    f"dimension mismatch: {len(p.embedding)} != {len(query_vector)}"
                )
            scored.append((_cos_sim(query_vector, p.embedding), p))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            MatchCandidate(
                id=p.id,
                text=p.text,
                similarity=sim,
                source_url=p.source_url,
                metadata=p.metadata,
            )
            for sim, p in scored[: max(match_count, 0)]
        ]

    def source_urls(self, tenant_id: str, passage_ids: Sequence[str]) -> dict[str, str | None]:
        return {
            pid: self.passages[pid].source_url
            for pid in passage_ids
            if pid in self.passages and self.passages[pid].tenant_id == tenant_id
        }

    def pending(self, tenant_id: str, limit: int) -> list[Passage]:
        rows = [
            p for p in self.passages.values() if p.tenant_id == tenant_id and p.embedding is None
        ]
        return rows[:limit]

    def set_embedding(self, tenant_id: str, passage_id: str, vector: Sequence[float]) -> None:
        current = self.passages.get(passage_id)
        if current is None or current.tenant_id != tenant_id:
            raise VectorStoreError(f"unknown passage {passage_id} for museum {tenant_id}")
        self.passages[passage_id] = replace(current, embedding=tuple(float(x) for x in vector))


@dataclass
class InMemoryMuseumFacts(MuseumFactsPort):
    records: dict[str, MuseumFacts] = field(default_factory=dict)

    def get(self, tenant_id: str) -> MuseumFacts | None:
        return self.records.get(tenant_id)
