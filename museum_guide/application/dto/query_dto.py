# museum_guide/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass

from museum_guide.domain.models import GroundedAnswer


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for one visitor question.

    - tenant_id:   museum id (strict UUID)
    - question:    visitor question (non-empty after stripping)
    - match_count: how many strong passages to use; not a positive whole number
                   -> default, clamped to cap
    """

    tenant_id: str
    question: str
    match_count: object = None


def to_wire(answer: GroundedAnswer) -> dict[str, object]:
    """Success / refusal response body."""
    return {
        "answer": answer.text,
        "sources": [
            {"id": c.id, "source_url": c.source_url, "similarity": c.similarity}
            for c in answer.citations
        ],
    }
