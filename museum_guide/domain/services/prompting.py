# museum_guide/domain/services/prompting.py
# Pure prompt construction; the LLM call itself lives in the application layer.
from __future__ import annotations

from collections.abc import Sequence

from museum_guide.domain.models import RetrievalMatch

UNSUPPORTED_ANSWER = "That isn’t available in the provided sources right now."

SYSTEM_INSTRUCTION = " ".join(
    [
        "You are a museum assistant.",
        "Use ONLY the provided Context to answer.",
        f'If the answer is not explicitly supported, say: "{UNSUPPORTED_ANSWER}"',
        "Do NOT guess names, dates, prices, or current exhibits.",
        "If the user asks time-sensitive questions (e.g., current exhibits), "
        "recommend checking the official website.",
        "Be concise (1–4 sentences).",
    ]
)


def build_context(matches: Sequence[RetrievalMatch]) -> str:
    """Numbered context block, one entry per match in ranked order."""
    return "\n\n".join(f"({i}) {m.text}" for i, m in enumerate(matches, 1))


def build_prompt(question: str, matches: Sequence[RetrievalMatch]) -> str:
    return "\n".join(
        [
            f"Context:\n{build_context(matches)}",
            f"\nQuestion: {question}",
            "\nAnswer:",
        ]
    )
