"""pgvector passage store reached through Supabase.

Why: Tenant filtering happens inside the `match_chunks` SQL function
     (WHERE museum_id = p_museum_id), so rows of other museums never leave
     the database.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from museum_guide.application.ports.passage_store_port import (
    MatchCandidate,
    Passage,
    PassageSearchPort,
    PassageWritePort,
)
from museum_guide.domain.errors import VectorStoreError


def to_vector_literal(vector: Sequence[float]) -> str:
    """pgvector text form: "[0.1,0.2,...]"."""
    return "[" + ",".join(str(float(x)) for x in vector) + "]"


@dataclass
class SupabasePassageStore(PassageSearchPort, PassageWritePort):
    client: Any
    table: str = "content_chunks"
    match_function: str = "match_chunks"

    def match(
        self, tenant_id: str, query_vector: Sequence[float], match_count: int
    ) -> list[MatchCandidate]:
        try:
            resp: Any = self.client.rpc(
                self.match_function,
                {
                    "p_museum_id": tenant_id,
                    "p_query_embedding": to_vector_literal(query_vector),
                    "p_match_count": match_count,
                },
            ).execute()
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"{self.match_function} failed: {ex}") from ex

        out: list[MatchCandidate] = []
        for row in resp.data or []:
            if "id" not in row:
                continue
            out.append(
                MatchCandidate(
                    id=str(row["id"]),
                    text=str(row.get("chunk_text") or ""),
                    # numeric may come back as a string; the gate parses it
                    similarity=row.get("similarity"),
                    source_url=row.get("source_url"),
                    metadata=row.get("metadata") or {},
                )
            )
        return out

    def source_urls(self, tenant_id: str, passage_ids: Sequence[str]) -> dict[str, str | None]:
        if not passage_ids:
            return {}
        try:
            resp: Any = (
                self.client.table(self.table)
                .select("id, source_url")
                .eq("museum_id", tenant_id)
                .in_("id", list(passage_ids))
                .execute()
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"source url lookup failed: {ex}") from ex
        return {str(r["id"]): r.get("source_url") for r in resp.data or []}

    def pending(self, tenant_id: str, limit: int) -> list[Passage]:
        try:
            resp: Any = (
                self.client.table(self.table)
                .select("id, chunk_text, source_url, metadata")
                .eq("museum_id", tenant_id)
                .is_("embedding", "null")
                .order("created_at")
                .limit(limit)
                .execute()
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"pending passage lookup failed: {ex}") from ex
        return [
            Passage(
                id=str(r["id"]),
                tenant_id=tenant_id,
                text=str(r.get("chunk_text") or ""),
                source_url=r.get("source_url"),
                metadata=r.get("metadata") or {},
            )
            for r in resp.data or []
        ]

    def set_embedding(self, tenant_id: str, passage_id: str, vector: Sequence[float]) -> None:
        try:
            (
                self.client.table(self.table)
                .update({"embedding": to_vector_literal(vector)})
                .eq("id", passage_id)
                .eq("museum_id", tenant_id)
                .execute()
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"embedding update failed for {passage_id}: {ex}") from ex
