"""Grounded answer composition over strong matches.

Why: The prompt is pure domain; this class only owns the model call and the
     translation of its failures.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from museum_guide.application.ports.llm_port import ChatMessage, LLMPort
from museum_guide.domain.errors import LLMError
from museum_guide.domain.models import RetrievalMatch
from museum_guide.domain.services.prompting import SYSTEM_INSTRUCTION, build_prompt

logger = logging.getLogger(__name__)


class AnswerComposer:
    def __init__(self, llm: LLMPort, temperature: float = 0.2, max_tokens: int = 512) -> None:
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    def compose(self, question: str, matches: Sequence[RetrievalMatch]) -> str:
        """Ask the model for a 1-4 sentence answer using only `matches` as context.

        Raises:
            LLMError: on any provider failure (never swallowed)
        """
        messages = [
            ChatMessage(role="system", content=SYSTEM_INSTRUCTION),
            ChatMessage(role="user", content=build_prompt(question, matches)),
        ]
        try:
            response = self.llm.chat(
                messages, temperature=self.temperature, max_tokens=self.max_tokens
            )
        except LLMError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise LLMError(f"llm generation failed: {ex}") from ex
        logger.debug(
            "llm finished: reason=%s tokens=%s", response.finish_reason, response.usage_tokens
        )
        if response.finish_reason == "length":
            logger.warning("llm answer truncated at max_tokens=%d", self.max_tokens)
        return response.text.strip()
