from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from museum_guide.application.ports.embedding_port import EmbeddingPort
from museum_guide.domain.errors import EmbeddingError


@dataclass
class OpenAIEmbeddingAdapter(EmbeddingPort):
    """OpenAI embeddings (fixed model id; 1536-d for text-embedding-3-small)."""

    api_key: str
    model: str = "text-embedding-3-small"
    base_url: str | None = None
    timeout_s: float = 30.0
    client: Any | None = field(default=None, repr=False)

    def _ensure_client(self) -> Any:
        if self.client is None:
            try:
                module = import_module("openai")
                # No retries here: a failed upstream call fails the query
                self.client = module.OpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=self.timeout_s,
                    max_retries=0,
                )
            except Exception as ex:  # noqa: BLE001
                raise EmbeddingError(f"OpenAI client init failed: {ex}") from ex
        return self.client

    def _create(self, inputs: str | list[str]) -> list[list[float]]:
        client = self._ensure_client()
        try:
            resp: Any = client.embeddings.create(model=self.model, input=inputs)
            data = sorted(resp.data, key=lambda d: d.index)
            return [[float(x) for x in d.embedding] for d in data]
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embeddings failed: {ex}") from ex

    def embed_query(self, text: str) -> list[float]:
        vectors = self._create(text)
        if not vectors or not vectors[0]:
            raise EmbeddingError("Embeddings response contained no vector")
        return vectors[0]

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        vectors = self._create(list(texts))
        if len(vectors) != len(texts) or any(not v for v in vectors):
            raise EmbeddingError("Embeddings response missing vectors")
        return vectors
