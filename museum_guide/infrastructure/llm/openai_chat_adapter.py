from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from museum_guide.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from museum_guide.domain.errors import LLMError


@dataclass
class OpenAIChatAdapter(LLMPort):
    """Chat completions against OpenAI or any OpenAI-compatible server (vLLM)."""

    api_key: str
    model: str = "gpt-4o-mini"
    base_url: str | None = None  # e.g. "http://localhost:8000/v1" for vLLM
    timeout_s: float = 30.0
    client: Any | None = field(default=None, repr=False)

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.2, max_tokens: int = 512
    ) -> LLMResponse:
        try:
            if self.client is None:
                module = import_module("openai")
                self.client = module.OpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=self.timeout_s,
                    max_retries=0,
                )
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            resp: Any = self.client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
            )
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise LLMError(f"Chat failed: {ex}") from ex
