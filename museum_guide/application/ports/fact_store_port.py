from typing import Protocol, runtime_checkable

from museum_guide.domain.models import MuseumFacts


@runtime_checkable
class MuseumFactsPort(Protocol):
    def get(self, tenant_id: str) -> MuseumFacts | None:
        """Fact record for `tenant_id`, or None when the museum is unknown.

        Raises FactStoreError when the store itself is unreachable.
        """
        ...
