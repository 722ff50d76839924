# museum_guide/application/use_cases/answer_question.py
from __future__ import annotations

import logging

from museum_guide.application.answer_composer import AnswerComposer
from museum_guide.application.dto.query_dto import QueryRequest
from museum_guide.application.ports.embedding_port import EmbeddingPort
from museum_guide.application.ports.fact_store_port import MuseumFactsPort
from museum_guide.application.ports.passage_store_port import PassageSearchPort
from museum_guide.application.ports.telemetry_port import NoopTelemetry, TelemetryPort
from museum_guide.domain.errors import (
    DomainError,
    EmbeddingError,
    FactStoreError,
    UpstreamError,
    VectorStoreError,
)
from museum_guide.domain.models import GroundedAnswer, MuseumFacts, RetrievalMatch
from museum_guide.domain.services import citations, fact_resolver, relevance
from museum_guide.domain.services.relevance import MIN_SIMILARITY, RetrievalTuning
from museum_guide.domain.types import Result
from museum_guide.domain.value_objects import Question, TenantId

logger = logging.getLogger(__name__)


class AnswerMuseumQuestion:
    """
    Application use case: question -> grounded answer with citations.

    Pipeline: validate -> structured facts (short-circuit) -> embed ->
    tenant-scoped search -> relevance gate (or refusal) -> compose -> cite.
    Uses only ports; returns Result[GroundedAnswer, DomainError]. Refusals are
    successful results, upstream failures are not.
    """

    def __init__(
        self,
        facts: MuseumFactsPort,
        embedding: EmbeddingPort,
        passages: PassageSearchPort,
        composer: AnswerComposer,
        tuning: RetrievalTuning | None = None,
        min_similarity: float = MIN_SIMILARITY,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.facts = facts
        self.embedding = embedding
        self.passages = passages
        self.composer = composer
        self.tuning = tuning or RetrievalTuning()
        self.min_similarity = min_similarity
        self.telemetry = telemetry or NoopTelemetry()

    def execute(self, req: QueryRequest) -> Result[GroundedAnswer, DomainError]:
        # 1) Validate before touching any upstream service
        try:
            tenant = TenantId(req.tenant_id)
            question = Question.parse(req.question)
        except DomainError as ex:
            return Result.failure(ex)

        try:
            answer = self._answer(str(tenant), question.text, req.match_count)
        except DomainError as ex:
            logger.error("query failed for museum %s: %s", tenant, ex)
            self.telemetry.incr("query.failed", {"error": type(ex).__name__})
            return Result.failure(ex)
        return Result.success(answer)

    def _answer(self, tenant_id: str, question: str, match_count: object) -> GroundedAnswer:
        # 2) Structured facts first; a hit never reaches retrieval
        profile = fact_resolver.resolve(question, self._load_facts(tenant_id))
        if profile is not None:
            self.telemetry.incr("query.profile_answer", {"refusal": profile.is_refusal})
            return profile

        requested = relevance.requested_count(match_count, self.tuning)
        fetch = relevance.candidate_count(requested, self.tuning)

        # 3) Embed query
        vector = self._embed(question)

        # 4) Tenant-scoped similarity search (overfetch; the store has no floor)
        try:
            candidates = self.passages.match(tenant_id, vector, fetch)
        except UpstreamError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"vector search failed: {ex}") from ex

        # 5) Relevance gate
        strong = relevance.gate(candidates, requested, self.min_similarity)
        self.telemetry.observe("query.strong_matches", float(len(strong)))
        if not strong:
            reason, text = relevance.refusal_for(question)
            logger.info(
                "refusing for museum %s: %s (%d candidates)", tenant_id, reason.value,
                len(candidates),
            )
            self.telemetry.incr("query.refusal", {"reason": reason.value})
            return GroundedAnswer(text=text, citations=[], refusal=reason)

        # 6) Compose from exactly the strong matches, in ranked order
        text = self.composer.compose(question, strong)

        # 7) Citations
        cites = citations.assemble(strong, self._source_urls(tenant_id, strong))
        self.telemetry.incr("query.answered")
        return GroundedAnswer(text=text, citations=cites)

    def _load_facts(self, tenant_id: str) -> MuseumFacts | None:
        try:
            return self.facts.get(tenant_id)
        except FactStoreError as ex:
            # Unreachable profile store degrades to "not found"
            logger.warning("fact lookup failed for museum %s: %s", tenant_id, ex)
            return None

    def _embed(self, question: str) -> list[float]:
        try:
            vector = self.embedding.embed_query(question)
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"embedding failed: {ex}") from ex
        if not vector:
            raise EmbeddingError("embedding service returned no vector")
        return vector

    def _source_urls(
        self, tenant_id: str, strong: list[RetrievalMatch]
    ) -> dict[str, str | None]:
        missing = [m.id for m in strong if not m.source_url]
        if not missing:
            return {}
        try:
            return self.passages.source_urls(tenant_id, missing)
        except UpstreamError as ex:
            logger.warning("source url lookup failed for museum %s: %s", tenant_id, ex)
            return {}
