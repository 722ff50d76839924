from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from museum_guide.domain.models import MatchCandidate, Passage

__all__ = ["MatchCandidate", "Passage", "PassageSearchPort", "PassageWritePort"]


@runtime_checkable
class PassageSearchPort(Protocol):
    def match(
        self, tenant_id: str, query_vector: Sequence[float], match_count: int
    ) -> list[MatchCandidate]:
        """Top `match_count` passages of `tenant_id` by descending similarity.

        Implementations MUST filter by tenant inside the store query; a row of
        another tenant must never come back, however close its vector is.
        """
        ...

    def source_urls(self, tenant_id: str, passage_ids: Sequence[str]) -> dict[str, str | None]:
        """Map passage id -> source URL for citation building."""
        ...


@runtime_checkable
class PassageWritePort(Protocol):
    def pending(self, tenant_id: str, limit: int) -> list[Passage]:
        """Passages of `tenant_id` that have no embedding yet, oldest first."""
        ...

    def set_embedding(self, tenant_id: str, passage_id: str, vector: Sequence[float]) -> None: ...
