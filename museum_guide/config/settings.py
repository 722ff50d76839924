"""Application settings with environment-driven configuration.

Why: The only place environment variables are read; every other layer
     receives settings via dependency injection.
"""

import base64
import binascii
import json
import os
from dataclasses import dataclass, field

from museum_guide.domain.errors import ConfigurationError
from museum_guide.domain.services.relevance import RetrievalTuning


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    Backends:
    - embedding_backend: "openai" (hosted) | "hf" (local sentence-transformers)
    - passage_backend:   "supabase" (pgvector RPC) | "qdrant" | "memory"
    """

    # ===== OpenAI / LLM Configuration =====
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", ""))
    # Empty = api.openai.com; set to a vLLM /v1 URL for self-hosted models

    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2"))
    )
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "512")))

    # ===== Embedding Configuration =====
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "openai").lower()
    )
    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))

    upstream_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT_S", "30"))
    )

    # ===== Passage / Fact Store Configuration =====
    passage_backend: str = field(
        default_factory=lambda: os.getenv("PASSAGE_BACKEND", "supabase").lower()
    )
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    service_role_key: str = field(default_factory=lambda: os.getenv("SERVICE_ROLE_KEY", ""))

    qdrant_url: str = field(
        default_factory=lambda: os.getenv("QDRANT_URL", "http://localhost:6333")
    )
    qdrant_api_key: str = field(default_factory=lambda: os.getenv("QDRANT_API_KEY", ""))
    qdrant_collection: str = field(
        default_factory=lambda: os.getenv("QDRANT_COLLECTION", "content_chunks")
    )

    # ===== Retrieval Configuration =====
    min_similarity: float = field(
        default_factory=lambda: float(os.getenv("MIN_SIMILARITY", "0.45"))
    )
    default_match_count: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_MATCH_COUNT", "5"))
    )
    match_floor: int = field(default_factory=lambda: int(os.getenv("RETRIEVAL_MATCH_FLOOR", "5")))
    match_padding: int = field(
        default_factory=lambda: int(os.getenv("RETRIEVAL_MATCH_PADDING", "5"))
    )
    match_cap: int = field(default_factory=lambda: int(os.getenv("RETRIEVAL_MATCH_CAP", "10")))

    # ===== Telemetry / Logging Configuration =====
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @property
    def retrieval_tuning(self) -> RetrievalTuning:
        return RetrievalTuning(
            default_count=self.default_match_count,
            floor=self.match_floor,
            padding=self.match_padding,
            cap=self.match_cap,
        )

    def missing_credentials(self) -> list[str]:
        """Names of required secrets that are not set for the chosen backends."""
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        # Museum profiles are read from Supabase for every non-memory backend
        if self.passage_backend != "memory" and not self.service_role_key:
            missing.append("SERVICE_ROLE_KEY")
        return missing

    def resolved_supabase_url(self) -> str:
        if self.supabase_url:
            return self.supabase_url
        return supabase_url_from_service_key(self.service_role_key)


def supabase_url_from_service_key(jwt: str) -> str:
    """Derive https://<ref>.supabase.co from the `ref` claim of a service-role JWT."""
    try:
        payload_b64 = jwt.split(".")[1]
        padded = payload_b64 + "=" * (-len(payload_b64) % 4)
        claims = json.loads(base64.urlsafe_b64decode(padded))
        ref = claims.get("ref")
    except (IndexError, ValueError, binascii.Error, AttributeError) as ex:
        raise ConfigurationError("Could not derive SUPABASE_URL from SERVICE_ROLE_KEY") from ex
    if not ref:
        raise ConfigurationError("Missing ref in SERVICE_ROLE_KEY payload")
    return f"https://{ref}.supabase.co"
