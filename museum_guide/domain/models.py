# museum_guide/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from museum_guide.domain.types import Vector


@dataclass(frozen=True)
class MuseumFacts:
    """
    Structured profile of one tenant (museum), read-only during a query.

    Every field except `id` is optional; an empty string counts as absent.
    """

    id: str
    name: str | None = None
    former_name: str | None = None
    founded_year: int | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    website: str | None = None
    mission: str | None = None
    director: str | None = None
    phone: str | None = None

    def location(self) -> str | None:
        parts = [self.address, self.city, self.state, self.postal_code, self.country]
        joined = ", ".join(p for p in parts if p)
        return joined or None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> MuseumFacts:
        """Build from a storage row, ignoring unknown columns."""
        year = row.get("founded_year")
        return cls(
            id=str(row["id"]),
            name=row.get("name"),
            former_name=row.get("former_name"),
            founded_year=int(year) if year not in (None, "") else None,
            address=row.get("address"),
            city=row.get("city"),
            state=row.get("state"),
            postal_code=row.get("postal_code"),
            country=row.get("country"),
            website=row.get("website"),
            mission=row.get("mission"),
            director=row.get("director"),
            phone=row.get("phone"),
        )


@dataclass(frozen=True)
class Passage:
    """A chunk of source text owned by exactly one tenant."""

    id: str
    tenant_id: str
    text: str
    source_url: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    embedding: Vector | None = None


@dataclass(frozen=True)
class MatchCandidate:
    """
    Raw similarity-search row as returned by a passage store.

    `similarity` is untrusted: some stores hand numerics back as strings.
    """

    id: str
    text: str
    similarity: float | str | None
    source_url: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RetrievalMatch:
    """A candidate whose similarity parsed to a finite float."""

    id: str
    text: str
    similarity: float
    source_url: str | None = None


@dataclass(frozen=True)
class Citation:
    """Citation reference for a grounded answer."""

    id: str
    source_url: str | None
    similarity: float

    @property
    def dedupe_key(self) -> str:
        return self.source_url or f"no_url:{self.id}"


class RefusalReason(str, Enum):
    PROFILE_FIELD_MISSING = "profile_field_missing"
    TIME_SENSITIVE = "time_sensitive"
    NO_STRONG_MATCH = "no_strong_match"


@dataclass(frozen=True)
class GroundedAnswer:
    """Composed answer plus ordered citations. Never persisted."""

    text: str
    citations: list[Citation]
    refusal: RefusalReason | None = None
    from_profile: bool = False

    @property
    def is_refusal(self) -> bool:
        return self.refusal is not None
