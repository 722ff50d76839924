"""Domain errors (typed) for the museum answer pipeline.

Why: One error family for the application layer, without infra leaks.
     Adapters translate client exceptions into these; the HTTP layer maps
     them onto status codes.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input (malformed tenant id, empty question)."""


class ConfigurationError(DomainError):
    """Required credentials or settings are missing."""


class UpstreamError(DomainError):
    """An external service failed or returned malformed data."""


class EmbeddingError(UpstreamError):
    """Embedding backend failed or is misconfigured."""


class VectorStoreError(UpstreamError):
    """Passage store / similarity search failed."""


class LLMError(UpstreamError):
    """Language model call failed."""


class FactStoreError(UpstreamError):
    """Tenant fact lookup failed (distinct from "not found")."""
