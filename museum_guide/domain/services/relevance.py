# museum_guide/domain/services/relevance.py
# Pure domain services: similarity parsing, over-fetch sizing, gating, recency.
from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from museum_guide.domain.models import MatchCandidate, RefusalReason, RetrievalMatch

MIN_SIMILARITY = 0.45

TIME_SENSITIVE_REFUSAL = (
    "That changes frequently and isn’t available in the provided sources right now. "
    "Please check the museum’s official website for the latest details."
)
NO_CONTEXT_REFUSAL = (
    "That isn’t available in the provided sources right now. "
    "Please check the museum’s official website."
)

_RECENCY = re.compile(
    r"\b(this week|today|right now|currently|current|now|tonight|tomorrow|yesterday)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RetrievalTuning:
    """
    Match-count knobs.

    - default_count: used when the caller gives no (or a non-positive) count
    - floor:         minimum requested count before padding is added
    - padding:       extra candidates fetched so gating still leaves enough
    - cap:           hard upper bound for both requested and fetched counts

    The values are tunable; no rationale beyond "more recall" is assumed.
    """

    default_count: int = 5
    floor: int = 5
    padding: int = 5
    cap: int = 10


def requested_count(match_count: object, tuning: RetrievalTuning = RetrievalTuning()) -> int:
    """Clamp the caller's match_count into [1, cap].

    Anything that is not a positive whole number (absent, 0, "5", 2.5, True)
    falls back to the default.
    """
    if isinstance(match_count, float) and match_count.is_integer():
        match_count = int(match_count)
    if not isinstance(match_count, int) or isinstance(match_count, bool) or match_count <= 0:
        return min(tuning.default_count, tuning.cap)
    return min(match_count, tuning.cap)


def candidate_count(requested: int, tuning: RetrievalTuning = RetrievalTuning()) -> int:
    """How many rows to ask the store for: min(max(requested, floor) + padding, cap)."""
    return min(max(requested, tuning.floor) + tuning.padding, tuning.cap)


def parse_similarity(raw: object) -> float | None:
    """Normalize a store-provided similarity to a finite float, or None."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int | float):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def normalize(candidates: Iterable[MatchCandidate]) -> list[RetrievalMatch]:
    """Parse similarities, dropping rows that fail to parse. Order is preserved."""
    out: list[RetrievalMatch] = []
    for c in candidates:
        sim = parse_similarity(c.similarity)
        if sim is None:
            continue
        out.append(RetrievalMatch(id=c.id, text=c.text, similarity=sim, source_url=c.source_url))
    return out


def gate(
    candidates: Iterable[MatchCandidate],
    requested: int,
    min_similarity: float = MIN_SIMILARITY,
) -> list[RetrievalMatch]:
    """
    Keep matches with similarity >= min_similarity, truncated to `requested`.

    The store already ranks by descending similarity; that order is kept.
    """
    strong = [m for m in normalize(candidates) if m.similarity >= min_similarity]
    return strong[: max(requested, 0)]


def is_time_sensitive(question: str) -> bool:
    return _RECENCY.search(question) is not None


def refusal_for(question: str) -> tuple[RefusalReason, str]:
    """Refusal to use when no strong context survived gating."""
    if is_time_sensitive(question):
        return RefusalReason.TIME_SENSITIVE, TIME_SENSITIVE_REFUSAL
    return RefusalReason.NO_STRONG_MATCH, NO_CONTEXT_REFUSAL
