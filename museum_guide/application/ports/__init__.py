"""Application ports package.

Re-exports the ports the use cases depend on.
"""

from museum_guide.application.ports.embedding_port import EmbeddingPort
from museum_guide.application.ports.fact_store_port import MuseumFactsPort
from museum_guide.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from museum_guide.application.ports.passage_store_port import (
    MatchCandidate,
    Passage,
    PassageSearchPort,
    PassageWritePort,
)
from museum_guide.application.ports.telemetry_port import NoopTelemetry, TelemetryPort

__all__ = [
    "ChatMessage",
    "EmbeddingPort",
    "LLMPort",
    "LLMResponse",
    "MatchCandidate",
    "MuseumFactsPort",
    "NoopTelemetry",
    "Passage",
    "PassageSearchPort",
    "PassageWritePort",
    "TelemetryPort",
]
