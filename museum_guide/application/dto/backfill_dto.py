from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BackfillRequest:
    """Embed up to `limit` passages of one museum that still lack a vector."""

    tenant_id: str
    limit: int = 50


@dataclass(frozen=True)
class BackfillReport:
    embedded: int
    updated: int
