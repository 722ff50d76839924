from __future__ import annotations

import re
from dataclasses import dataclass

from museum_guide.domain.errors import ValidationError

_TENANT_ID = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def is_valid_tenant_id(value: object) -> bool:
    return isinstance(value, str) and _TENANT_ID.fullmatch(value) is not None


@dataclass(slots=True, frozen=True)
class TenantId:
    """Museum identifier: an RFC 4122 UUID (versions 1-5)."""

    value: str

    def __post_init__(self) -> None:
        if not is_valid_tenant_id(self.value):
            raise ValidationError("Invalid or missing museum_id")

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True, frozen=True)
class Question:
    """Visitor question, stripped and non-empty."""

    text: str

    @classmethod
    def parse(cls, raw: object) -> Question:
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            raise ValidationError("Missing question")
        return cls(text)
