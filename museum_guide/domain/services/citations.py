# museum_guide/domain/services/citations.py
# Pure domain services: wire citations and the presentation-layer source list.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import urlparse

from museum_guide.domain.models import Citation, RetrievalMatch


def assemble(
    matches: Sequence[RetrievalMatch],
    source_urls: Mapping[str, str | None] | None = None,
) -> list[Citation]:
    """
    One citation per strong match, in ranked order.

    A URL already carried by the match wins; otherwise `source_urls` (looked
    up by passage id) fills it in.
    """
    lookup = source_urls or {}
    return [
        Citation(
            id=m.id,
            source_url=m.source_url or lookup.get(m.id) or None,
            similarity=m.similarity,
        )
        for m in matches
    ]


def dedupe_top(citations: Sequence[Citation], limit: int = 1) -> list[Citation]:
    """
    Collapse chunks from the same page into one source.

    Groups by URL (or a per-id key when there is no URL), keeps the highest
    similarity per group, sorts descending and returns the first `limit`.
    """
    best: dict[str, Citation] = {}
    for c in citations:
        existing = best.get(c.dedupe_key)
        if existing is None or c.similarity > existing.similarity:
            best[c.dedupe_key] = c
    ranked = sorted(best.values(), key=lambda c: c.similarity, reverse=True)
    return ranked[: max(limit, 0)]


def similarity_percent(similarity: float) -> int:
    return round(similarity * 100)


def confidence_label(percent: float) -> str:
    """Display aid only; never used for gating."""
    if percent >= 70:
        return "Strong"
    if percent >= 50:
        return "Good"
    return "Weak"


def display_host(url: str) -> str:
    host = urlparse(url).netloc
    if not host:
        return url
    return host.replace("www.", "")
