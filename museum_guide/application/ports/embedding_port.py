from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    def embed_query(self, text: str) -> list[float]:
        """Embed one question. Raises EmbeddingError on failure or empty output."""
        ...

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        """Batch form, used by the backfill use case only."""
        ...
