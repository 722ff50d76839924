"""OpenAI embedding and chat adapters against fake SDK clients."""

from types import SimpleNamespace
from typing import Any

import pytest

from museum_guide.application.ports.llm_port import ChatMessage
from museum_guide.domain.errors import EmbeddingError, LLMError
from museum_guide.infrastructure.embeddings.openai_embeddings import OpenAIEmbeddingAdapter
from museum_guide.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter


class FakeEmbeddings:
    def __init__(self, vectors: list[list[float]], fail: bool = False) -> None:
        self.vectors = vectors
        self.fail = fail
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.fail:
            raise RuntimeError("401 invalid api key")
        data = [SimpleNamespace(index=i, embedding=v) for i, v in enumerate(self.vectors)]
        return SimpleNamespace(data=list(reversed(data)))


class FakeCompletions:
    def __init__(self, content: str | None = "Hello.", fail: bool = False) -> None:
        self.content = content
        self.fail = fail
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.fail:
            raise TimeoutError("read timed out")
        choice = SimpleNamespace(
            message=SimpleNamespace(content=self.content), finish_reason="stop"
        )
        return SimpleNamespace(choices=[choice], usage=SimpleNamespace(total_tokens=42))


def embedding_adapter(embeddings: FakeEmbeddings) -> OpenAIEmbeddingAdapter:
    return OpenAIEmbeddingAdapter(api_key="sk-test", client=SimpleNamespace(embeddings=embeddings))


class TestEmbeddings:
    def test_embed_query(self) -> None:
        fake = FakeEmbeddings([[0.1, 0.2]])
        assert embedding_adapter(fake).embed_query("hi") == [0.1, 0.2]
        assert fake.calls == [{"model": "text-embedding-3-small", "input": "hi"}]

    def test_embed_texts_restores_input_order(self) -> None:
        fake = FakeEmbeddings([[1.0], [2.0], [3.0]])
        assert embedding_adapter(fake).embed_texts(["a", "b", "c"]) == [[1.0], [2.0], [3.0]]

    def test_failure_is_embedding_error(self) -> None:
        with pytest.raises(EmbeddingError, match="invalid api key"):
            embedding_adapter(FakeEmbeddings([], fail=True)).embed_query("hi")

    def test_missing_vector_is_embedding_error(self) -> None:
        with pytest.raises(EmbeddingError):
            embedding_adapter(FakeEmbeddings([])).embed_query("hi")
        with pytest.raises(EmbeddingError):
            embedding_adapter(FakeEmbeddings([[]])).embed_query("hi")


class TestChat:
    def test_chat_maps_messages_and_response(self) -> None:
        completions = FakeCompletions()
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        adapter = OpenAIChatAdapter(api_key="sk-test", client=client)

        resp = adapter.chat(
            [ChatMessage(role="system", content="s"), ChatMessage(role="user", content="u")],
            temperature=0.2,
            max_tokens=100,
        )

        assert resp.text == "Hello."
        assert resp.usage_tokens == 42
        call = completions.calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert call["messages"] == [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u"},
        ]
        assert call["temperature"] == 0.2

    def test_empty_content_becomes_empty_text(self) -> None:
        client = SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content=None)))
        assert OpenAIChatAdapter(api_key="k", client=client).chat([]).text == ""

    def test_timeout_is_llm_error(self) -> None:
        client = SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(fail=True)))
        with pytest.raises(LLMError, match="read timed out"):
            OpenAIChatAdapter(api_key="k", client=client).chat([])
