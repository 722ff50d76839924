"""Dependency injection container with environment-driven wiring.

Why: Single place for wiring; all other layers remain pure. Adapters are
     built lazily, so a missing secret fails before any upstream call.
"""

from __future__ import annotations

from typing import Any

from museum_guide.application.answer_composer import AnswerComposer
from museum_guide.application.ports import (
    EmbeddingPort,
    LLMPort,
    MuseumFactsPort,
    NoopTelemetry,
    PassageSearchPort,
    PassageWritePort,
    TelemetryPort,
)
from museum_guide.application.use_cases.answer_question import AnswerMuseumQuestion
from museum_guide.application.use_cases.backfill_embeddings import BackfillEmbeddings
from museum_guide.config.settings import AppSettings
from museum_guide.domain.errors import ConfigurationError


class Container:
    """Dependency injection container for application components.

    Responsibilities:
    1. Read settings from environment (via AppSettings)
    2. Choose adapters based on settings (passage_backend, embedding_backend)
    3. Inject dependencies into use cases
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self.settings = settings or AppSettings()
        self._supabase: Any | None = None
        self._embedding: EmbeddingPort | None = None
        self._passages: Any | None = None
        self._facts: MuseumFactsPort | None = None
        self._llm: LLMPort | None = None
        self._telemetry: TelemetryPort | None = None

    def check_credentials(self) -> None:
        missing = self.settings.missing_credentials()
        if missing:
            raise ConfigurationError(f"missing credentials: {', '.join(missing)}")

    # ===== Adapters =====

    def get_embedding(self) -> EmbeddingPort:
        if self._embedding is None:
            self._embedding = self._build_embedding()
        return self._embedding

    def get_passages(self) -> PassageSearchPort:
        if self._passages is None:
            self._passages = self._build_passages()
        return self._passages

    def get_facts(self) -> MuseumFactsPort:
        if self._facts is None:
            self._facts = self._build_facts()
        return self._facts

    def get_llm(self) -> LLMPort:
        if self._llm is None:
            from museum_guide.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter

            self._llm = OpenAIChatAdapter(
                api_key=self.settings.openai_api_key,
                model=self.settings.llm_model,
                base_url=self.settings.openai_base_url or None,
                timeout_s=self.settings.upstream_timeout_s,
            )
        return self._llm

    def get_telemetry(self) -> TelemetryPort:
        if self._telemetry is None:
            self._telemetry = self._build_telemetry()
        return self._telemetry

    # ===== Use Cases =====

    def get_answer_use_case(self) -> AnswerMuseumQuestion:
        """Build the query pipeline; raises ConfigurationError on missing secrets."""
        self.check_credentials()
        return AnswerMuseumQuestion(
            facts=self.get_facts(),
            embedding=self.get_embedding(),
            passages=self.get_passages(),
            composer=AnswerComposer(
                self.get_llm(),
                temperature=self.settings.llm_temperature,
                max_tokens=self.settings.llm_max_tokens,
            ),
            tuning=self.settings.retrieval_tuning,
            min_similarity=self.settings.min_similarity,
            telemetry=self.get_telemetry(),
        )

    def get_backfill_use_case(self) -> BackfillEmbeddings:
        self.check_credentials()
        passages = self.get_passages()
        if not isinstance(passages, PassageWritePort):
            raise ConfigurationError(
                f"passage backend '{self.settings.passage_backend}' does not support backfill"
            )
        return BackfillEmbeddings(embedding=self.get_embedding(), passages=passages)

    # ===== Private Builder Methods =====

    def _get_supabase(self) -> Any:
        if self._supabase is None:
            from museum_guide.infrastructure.supabase.client import create_supabase_client

            self._supabase = create_supabase_client(
                self.settings.resolved_supabase_url(),
                self.settings.service_role_key,
                timeout_s=self.settings.upstream_timeout_s,
            )
        return self._supabase

    def _build_embedding(self) -> EmbeddingPort:
        backend = self.settings.embedding_backend
        if backend == "hf":
            from museum_guide.infrastructure.embeddings.hf_sentence_transformers import (
                HFEmbeddingAdapter,
            )

            return HFEmbeddingAdapter(
                model_name=self.settings.embedding_model, device=self.settings.embedding_device
            )
        if backend == "openai":
            from museum_guide.infrastructure.embeddings.openai_embeddings import (
                OpenAIEmbeddingAdapter,
            )

            return OpenAIEmbeddingAdapter(
                api_key=self.settings.openai_api_key,
                model=self.settings.embedding_model,
                base_url=self.settings.openai_base_url or None,
                timeout_s=self.settings.upstream_timeout_s,
            )
        raise ConfigurationError(f"unknown EMBEDDING_BACKEND '{backend}'")

    def _build_passages(self) -> PassageSearchPort:
        """Supports: supabase | qdrant | memory."""
        backend = self.settings.passage_backend
        if backend == "supabase":
            from museum_guide.infrastructure.supabase.passage_store import SupabasePassageStore

            return SupabasePassageStore(self._get_supabase())
        if backend == "qdrant":
            from museum_guide.infrastructure.passages.qdrant_store import (
                QdrantConfig,
                QdrantPassageStore,
            )

            cfg = QdrantConfig(
                url=self.settings.qdrant_url,
                collection=self.settings.qdrant_collection,
                api_key=self.settings.qdrant_api_key or None,
                timeout_s=int(self.settings.upstream_timeout_s),
            )
            return QdrantPassageStore(cfg)
        if backend == "memory":
            from museum_guide.infrastructure.passages.memory_store import InMemoryPassageStore

            return InMemoryPassageStore()
        raise ConfigurationError(f"unknown PASSAGE_BACKEND '{backend}'")

    def _build_facts(self) -> MuseumFactsPort:
        # Museum profiles live in Supabase unless everything runs in memory
        if self.settings.passage_backend == "memory":
            from museum_guide.infrastructure.passages.memory_store import InMemoryMuseumFacts

            return InMemoryMuseumFacts()
        from museum_guide.infrastructure.supabase.facts_store import SupabaseMuseumFacts

        return SupabaseMuseumFacts(self._get_supabase())

    def _build_telemetry(self) -> TelemetryPort:
        if not self.settings.telemetry_enabled:
            return NoopTelemetry()

        from museum_guide.infrastructure.telemetry.otel_adapter import (
            OpenTelemetryAdapter,
            OtelConfig,
        )

        cfg = OtelConfig(
            service_name="museum-guide",
            otlp_endpoint=self.settings.otlp_endpoint or None,
            environment=self.settings.telemetry_environment,
        )
        return OpenTelemetryAdapter(cfg)


def build_container(settings: AppSettings | None = None) -> Container:
    """Build dependency injection container with settings.

    Example:
        container = build_container()
        result = container.get_answer_use_case().execute(request)
    """
    return Container(settings)
