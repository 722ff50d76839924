from __future__ import annotations

import logging
from dataclasses import dataclass

from museum_guide.application.dto.backfill_dto import BackfillReport, BackfillRequest
from museum_guide.application.ports.embedding_port import EmbeddingPort
from museum_guide.application.ports.passage_store_port import PassageWritePort
from museum_guide.domain.errors import DomainError, EmbeddingError, ValidationError
from museum_guide.domain.types import Result
from museum_guide.domain.value_objects import TenantId

logger = logging.getLogger(__name__)


@dataclass
class BackfillEmbeddings:
    """Embed stored passages of one museum that were ingested without a vector."""

    embedding: EmbeddingPort
    passages: PassageWritePort

    def execute(self, req: BackfillRequest) -> Result[BackfillReport, DomainError]:
        try:
            tenant = str(TenantId(req.tenant_id))
            if req.limit <= 0:
                raise ValidationError("limit must be > 0")

            # 1) Rows still missing an embedding
            pending = self.passages.pending(tenant, req.limit)
            if not pending:
                return Result.success(BackfillReport(embedded=0, updated=0))

            # 2) One batch embedding call
            vectors = self.embedding.embed_texts([p.text for p in pending])
            if len(vectors) != len(pending):
                raise EmbeddingError(
                    f"expected {len(pending)} embeddings, got {len(vectors)}"
                )

            # 3) Write back one row at a time
            updated = 0
            for passage, vector in zip(pending, vectors, strict=True):
                self.passages.set_embedding(tenant, passage.id, vector)
                updated += 1
        except DomainError as ex:
            logger.error("backfill failed for museum %s: %s", req.tenant_id, ex)
            return Result.failure(ex)

        logger.info("backfilled %d passages for museum %s", updated, tenant)
        return Result.success(BackfillReport(embedded=len(vectors), updated=updated))
