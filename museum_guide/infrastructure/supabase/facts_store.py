from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from museum_guide.application.ports.fact_store_port import MuseumFactsPort
from museum_guide.domain.errors import FactStoreError
from museum_guide.domain.models import MuseumFacts

MUSEUM_COLUMNS = (
    "id,name,address,city,state,postal_code,country,website,phone,director,"
    "founded_year,former_name,mission"
)


@dataclass
class SupabaseMuseumFacts(MuseumFactsPort):
    """Reads the `museums` profile row for a tenant."""

    client: Any
    table: str = "museums"

    def get(self, tenant_id: str) -> MuseumFacts | None:
        try:
            resp: Any = (
                self.client.table(self.table)
                .select(MUSEUM_COLUMNS)
                .eq("id", tenant_id)
                .limit(1)
                .execute()
            )
        except Exception as ex:  # noqa: BLE001
            raise FactStoreError(f"museum lookup failed: {ex}") from ex
        rows = resp.data or []
        if not rows:
            return None
        try:
            return MuseumFacts.from_row(rows[0])
        except (KeyError, TypeError, ValueError) as ex:
            raise FactStoreError(f"malformed museum row: {ex}") from ex
