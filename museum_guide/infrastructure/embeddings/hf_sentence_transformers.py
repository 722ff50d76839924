from __future__ import annotations

from collections.abc import Sequence
from collections.abc import Sequence as SequenceType
from dataclasses import dataclass
from typing import Any, cast

from museum_guide.application.ports.embedding_port import EmbeddingPort
from museum_guide.domain.errors import EmbeddingError

# Lazy import for testability (allow monkeypatching fake SentenceTransformer)
SentenceTransformer: Any | None
try:  # pragma: no cover - exercised via tests with monkeypatch
    from sentence_transformers import SentenceTransformer as _SentenceTransformer
except Exception:  # noqa: BLE001
    SentenceTransformer = None
else:  # pragma: no cover - exercised in integration
    SentenceTransformer = _SentenceTransformer


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    """Local Sentence-Transformers embeddings for self-hosted deployments.

    The model must produce vectors of the same dimensionality as the stored
    passages; mixing models between ingestion and query is not detected here.
    """

    model_name: str = "sentence-transformers/all-mpnet-base-v2"
    device: str = "cpu"  # switch to "cuda" when available
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = None

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        if SentenceTransformer is None:
            raise EmbeddingError("sentence-transformers not installed.")
        try:
            self._model = SentenceTransformer(
                self.model_name,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(
                f"Failed to load embedding model '{self.model_name}': {ex}"
            ) from ex
        return self._model

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        model = self._ensure_model()
        try:
            raw_vectors = model.encode(
                list(texts),
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding texts failed: {ex}") from ex
        vectors = cast(SequenceType[SequenceType[float]], raw_vectors)
        return [list(map(float, vec)) for vec in vectors]

    def embed_query(self, text: str) -> list[float]:
        model = self._ensure_model()
        try:
            raw_vector = model.encode(
                text,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding query failed: {ex}") from ex
        vector = [float(x) for x in cast(SequenceType[float], raw_vector)]
        if not vector:
            raise EmbeddingError("Embedding model returned an empty vector")
        return vector
