# museum_guide/domain/services/fact_resolver.py
# Pure domain service: answers profile questions from structured museum facts.
from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache

from museum_guide.domain.models import Citation, GroundedAnswer, MuseumFacts, RefusalReason

PROFILE_SOURCE_PREFIX = "museum_profile:"
_UNAVAILABLE = "That isn’t available in the provided sources right now."


@lru_cache(maxsize=256)
def _compile_phrase(phrase: str) -> re.Pattern[str]:
    # Word boundaries so that "admission" never matches "mission".
    return re.compile(rf"(?:^|\b){re.escape(phrase.lower())}(?:\b|$)", re.IGNORECASE)


def has_whole_phrase(question: str, phrase: str) -> bool:
    return _compile_phrase(phrase).search(question) is not None


@dataclass(frozen=True)
class FactRule:
    """One row of the resolver table.

    - category:  short label, used for logging and telemetry tags
    - triggers:  whole phrases; any hit selects the rule
    - patterns:  extra regexes tried against the lower-cased question
    - value:     accessor returning the fact value or None when absent
    - template:  answer format, receives the value as `{value}`
    - refusal:   fixed sentence returned when the value is absent
    """

    category: str
    triggers: tuple[str, ...]
    value: Callable[[MuseumFacts], object | None]
    template: str
    refusal: str
    patterns: tuple[str, ...] = ()
    _compiled: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = [_compile_phrase(t) for t in self.triggers]
        compiled += [re.compile(p) for p in self.patterns]
        object.__setattr__(self, "_compiled", tuple(compiled))

    def matches(self, question: str) -> bool:
        return any(rx.search(question) for rx in self._compiled)


FACT_RULES: tuple[FactRule, ...] = (
    FactRule(
        category="director",
        triggers=("director", "ceo", "leadership", "executive director", "museum director"),
        value=lambda f: f.director,
        template="The museum’s director is {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website for the latest "
        "leadership details.",
    ),
    FactRule(
        category="mission",
        triggers=("mission", "purpose", "goal"),
        value=lambda f: f.mission,
        template="Mission: {value}",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website for the mission "
        "statement.",
    ),
    FactRule(
        category="founded",
        triggers=("founded", "established", "built"),
        patterns=(r"when was.*(founded|established)", r"when did.*open"),
        value=lambda f: f.founded_year,
        template="The museum was founded in {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website for its history.",
    ),
    FactRule(
        category="former_name",
        triggers=(
            "formerly",
            "former name",
            "used to be called",
            "old name",
            "renamed",
            "name change",
        ),
        value=lambda f: f.former_name,
        template="It was formerly known as {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website for details about "
        "the name change.",
    ),
    FactRule(
        category="location",
        triggers=("address", "location", "where is it", "how do i get there"),
        patterns=(r"where.*located",),
        value=lambda f: f.location(),
        template="The museum is located at {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website for location "
        "details.",
    ),
    FactRule(
        category="website",
        triggers=("website", "official site", "url"),
        value=lambda f: f.website,
        template="The official website is {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website.",
    ),
    FactRule(
        category="phone",
        triggers=("phone", "telephone", "contact number", "call"),
        value=lambda f: f.phone,
        template="You can reach the museum at {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website.",
    ),
    # Kept narrow so a stray "name" does not hijack unrelated questions.
    FactRule(
        category="name",
        triggers=("name of the museum", "full name"),
        patterns=(r"what.*name",),
        value=lambda f: f.name,
        template="The museum is called {value}.",
        refusal=f"{_UNAVAILABLE} Please check the museum’s official website.",
    ),
)


def profile_citation(facts: MuseumFacts) -> Citation:
    return Citation(
        id=f"{PROFILE_SOURCE_PREFIX}{facts.id}",
        source_url=facts.website or None,
        similarity=1.0,
    )


def match_rule(question: str, rules: Sequence[FactRule] = FACT_RULES) -> FactRule | None:
    """Return the first rule whose trigger matches, in table order."""
    q = question.lower()
    for rule in rules:
        if rule.matches(q):
            return rule
    return None


def resolve(
    question: str,
    facts: MuseumFacts | None,
    rules: Sequence[FactRule] = FACT_RULES,
) -> GroundedAnswer | None:
    """
    Try to answer `question` straight from the tenant's fact record.

    Returns None ("no match") when no rule fires or no record exists; the
    caller then falls through to retrieval. A rule that fires on an absent
    field yields its fixed refusal with no citations.
    """
    if facts is None:
        return None

    rule = match_rule(question, rules)
    if rule is None:
        return None

    value = rule.value(facts)
    if value is None or value == "":
        return GroundedAnswer(
            text=rule.refusal,
            citations=[],
            refusal=RefusalReason.PROFILE_FIELD_MISSING,
            from_profile=True,
        )

    return GroundedAnswer(
        text=rule.template.format(value=value),
        citations=[profile_citation(facts)],
        from_profile=True,
    )
