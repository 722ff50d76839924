"""Qdrant passage store with a mandatory tenant filter.

Why: Qdrant ranks without a similarity floor, like pgvector; the tenant
     condition is part of every query filter so foreign points are never
     scored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from museum_guide.application.ports.passage_store_port import MatchCandidate, PassageSearchPort
from museum_guide.domain.errors import VectorStoreError

TENANT_KEY = "museum_id"


@dataclass
class QdrantConfig:
    """Configuration for Qdrant client connection."""

    url: str
    collection: str = "content_chunks"
    api_key: str | None = None
    timeout_s: int = 30


class QdrantPassageStore(PassageSearchPort):
    """Points carry payload {museum_id, text, source_url, metadata}."""

    def __init__(self, cfg: QdrantConfig, client: Any | None = None) -> None:
        self._cfg = cfg
        self._client = client if client is not None else self._init_client(cfg)

    def _init_client(self, cfg: QdrantConfig) -> Any:
        try:
            qdrant_client = import_module("qdrant_client")
            return qdrant_client.QdrantClient(
                url=cfg.url,
                api_key=cfg.api_key,
                timeout=cfg.timeout_s,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Qdrant init failed: {ex}") from ex

    def tenant_filter(self, tenant_id: str) -> Any:
        models = import_module("qdrant_client.models")
        return models.Filter(
            must=[models.FieldCondition(key=TENANT_KEY, match=models.MatchValue(value=tenant_id))]
        )

    def match(
        self, tenant_id: str, query_vector: Sequence[float], match_count: int
    ) -> list[MatchCandidate]:
        try:
            resp = self._client.query_points(
                collection_name=self._cfg.collection,
                query=list(query_vector),
                limit=match_count,
                query_filter=self.tenant_filter(tenant_id),
                with_payload=True,
                with_vectors=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"qdrant search failed: {ex}") from ex

        out: list[MatchCandidate] = []
        for point in resp.points:
            payload = dict(point.payload or {})
            if payload.get(TENANT_KEY) != tenant_id:
                continue
            out.append(
                MatchCandidate(
                    id=str(point.id),
                    text=str(payload.get("text") or ""),
                    similarity=point.score,
                    source_url=payload.get("source_url"),
                    metadata=payload.get("metadata") or {},
                )
            )
        return out

    def source_urls(self, tenant_id: str, passage_ids: Sequence[str]) -> dict[str, str | None]:
        if not passage_ids:
            return {}
        try:
            points = self._client.retrieve(
                collection_name=self._cfg.collection,
                ids=list(passage_ids),
                with_payload=True,
                with_vectors=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"qdrant retrieve failed: {ex}") from ex
        return {
            str(p.id): (p.payload or {}).get("source_url")
            for p in points
            if (p.payload or {}).get(TENANT_KEY) == tenant_id
        }
