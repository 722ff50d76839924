"""Tests for similarity parsing, over-fetch sizing and the relevance gate."""

import math

import pytest

from museum_guide.domain.models import MatchCandidate, RefusalReason
from museum_guide.domain.services.relevance import (
    NO_CONTEXT_REFUSAL,
    TIME_SENSITIVE_REFUSAL,
    RetrievalTuning,
    candidate_count,
    gate,
    is_time_sensitive,
    parse_similarity,
    refusal_for,
    requested_count,
)


def cand(id_: str, similarity: object) -> MatchCandidate:
    return MatchCandidate(id=id_, text=f"text {id_}", similarity=similarity)  # type: ignore[arg-type]


class TestParseSimilarity:
    def test_numbers_and_numeric_strings(self) -> None:
        assert parse_similarity(0.5) == 0.5
        assert parse_similarity(1) == 1.0
        assert parse_similarity("0.73") == pytest.approx(0.73)
        assert parse_similarity(" 0.6 ") == pytest.approx(0.6)

    @pytest.mark.parametrize("raw", [None, "", "abc", math.nan, math.inf, "NaN", True, [0.5]])
    def test_unparseable_is_none(self, raw: object) -> None:
        assert parse_similarity(raw) is None


class TestMatchCounts:
    def test_requested_count_defaults_and_clamps(self) -> None:
        assert requested_count(None) == 5
        assert requested_count(0) == 5
        assert requested_count(-3) == 5
        assert requested_count(3) == 3
        assert requested_count(50) == 10

    @pytest.mark.parametrize("raw", ["5", 2.5, True, [3], float("nan")])
    def test_requested_count_ignores_non_whole_numbers(self, raw: object) -> None:
        assert requested_count(raw) == 5

    def test_requested_count_accepts_whole_floats(self) -> None:
        assert requested_count(3.0) == 3
        assert requested_count(12.0) == 10

    @pytest.mark.parametrize(
        ("requested", "expected"),
        [(1, 10), (3, 10), (5, 10), (7, 10), (10, 10)],
    )
    def test_candidate_count_default_tuning(self, requested: int, expected: int) -> None:
        assert candidate_count(requested) == expected

    def test_candidate_count_uses_tuning(self) -> None:
        tuning = RetrievalTuning(default_count=3, floor=2, padding=3, cap=20)
        assert candidate_count(1, tuning) == 5
        assert candidate_count(10, tuning) == 13
        assert requested_count(None, tuning) == 3


class TestGate:
    def test_drops_weak_and_unparseable_preserving_order(self) -> None:
        strong = gate(
            [cand("a", "0.91"), cand("b", "oops"), cand("c", 0.5), cand("d", 0.44)],
            requested=5,
        )
        assert [m.id for m in strong] == ["a", "c"]
        assert strong[0].similarity == pytest.approx(0.91)

    def test_floor_is_inclusive(self) -> None:
        assert [m.id for m in gate([cand("a", 0.45)], requested=5)] == ["a"]

    def test_truncates_to_requested(self) -> None:
        strong = gate([cand(str(i), 0.9 - i * 0.01) for i in range(8)], requested=3)
        assert [m.id for m in strong] == ["0", "1", "2"]

    def test_custom_floor(self) -> None:
        assert gate([cand("a", 0.6)], requested=5, min_similarity=0.7) == []


class TestTimeSensitivity:
    @pytest.mark.parametrize(
        "question",
        [
            "What's showing today?",
            "What are today's hours?",
            "Is the cafe open right now?",
            "What exhibits are current?",
            "Anything on this week?",
            "Open tomorrow?",
        ],
    )
    def test_recency_markers(self, question: str) -> None:
        assert is_time_sensitive(question)

    @pytest.mark.parametrize(
        "question", ["Who founded the museum?", "Is there a nowhere gallery?", "Tell me about currents"]
    )
    def test_word_boundaries(self, question: str) -> None:
        assert not is_time_sensitive(question)

    def test_refusal_for(self) -> None:
        reason, text = refusal_for("What's showing today?")
        assert reason is RefusalReason.TIME_SENSITIVE
        assert text == TIME_SENSITIVE_REFUSAL
        assert "changes frequently" in text

        reason, text = refusal_for("Who painted the mural?")
        assert reason is RefusalReason.NO_STRONG_MATCH
        assert text == NO_CONTEXT_REFUSAL
        assert text != TIME_SENSITIVE_REFUSAL
