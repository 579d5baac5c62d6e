# tests/unit/llm/test_ollama_adapter.py — v1
"""Tests for llm/adapters/ollama_adapter.py — SDK calls mocked."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from agentweave.core.cancellation import CallContext
from agentweave.core.errors import InferenceError, TaskCancelledError
from agentweave.llm.adapters.ollama_adapter import OllamaAdapter
from agentweave.llm.models import ChatMessage


def _generate_stream():
    return [
        {"response": "Hel", "done": False},
        {"response": "lo", "done": True, "prompt_eval_count": 5, "eval_count": 2},
    ]


class TestGenerate:
    def test_streams_chunks_with_final_tokens(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.return_value = _generate_stream()
            adapter = OllamaAdapter(host="http://h:1", timeout=30)
            chunks = list(adapter.generate("llama3.2", "Hi", options={"temperature": 0}))

        assert "".join(c.content for c in chunks) == "Hello"
        assert chunks[0].input_tokens is None
        assert chunks[-1].done is True
        assert chunks[-1].input_tokens == 5
        assert chunks[-1].output_tokens == 2
        client_cls.assert_called_once_with(host="http://h:1", timeout=30)
        client_cls.return_value.generate.assert_called_once_with(
            model="llama3.2", prompt="Hi", options={"temperature": 0}, stream=True,
        )

    def test_sdk_error_wrapped(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.side_effect = ConnectionError("refused")
            adapter = OllamaAdapter()
            with pytest.raises(InferenceError, match="refused"):
                list(adapter.generate("llama3.2", "Hi"))

    def test_cancelled_between_chunks(self):
        ctx = CallContext()
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.return_value = _generate_stream()
            stream = OllamaAdapter().generate("llama3.2", "Hi", ctx=ctx)
            first = next(stream)
            ctx.cancel()
            with pytest.raises(TaskCancelledError):
                next(stream)
        assert first.content == "Hel"

    def test_deadline_bounds_timeout(self):
        ctx = CallContext.with_timeout(2)
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.return_value = _generate_stream()
            list(OllamaAdapter(timeout=300).generate("llama3.2", "Hi", ctx=ctx))
        timeout = client_cls.call_args.kwargs["timeout"]
        assert 0 < timeout <= 2

    def test_deadline_client_closed_after_stream(self):
        ctx = CallContext.with_timeout(2)
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.return_value = _generate_stream()
            list(OllamaAdapter(timeout=300).generate("llama3.2", "Hi", ctx=ctx))
        client_cls.return_value._client.close.assert_called_once_with()

    def test_deadline_client_closed_on_error(self):
        ctx = CallContext.with_timeout(2)
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.side_effect = ConnectionError("refused")
            with pytest.raises(InferenceError):
                list(OllamaAdapter(timeout=300).generate("llama3.2", "Hi", ctx=ctx))
        client_cls.return_value._client.close.assert_called_once_with()

    def test_shared_client_reused_and_kept_open(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.generate.side_effect = lambda **_: _generate_stream()
            adapter = OllamaAdapter()
            list(adapter.generate("llama3.2", "Hi"))
            list(adapter.generate("llama3.2", "Again"))
        client_cls.assert_called_once()
        client_cls.return_value._client.close.assert_not_called()


class TestChat:
    def test_messages_forwarded(self):
        stream = [
            {"message": {"role": "assistant", "content": "Yes"}, "done": False},
            {"message": {"role": "assistant", "content": "!"}, "done": True,
             "prompt_eval_count": 9, "eval_count": 1},
        ]
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.chat.return_value = stream
            chunks = list(
                OllamaAdapter().chat(
                    "llama3.2",
                    [ChatMessage(role="system", content="Be brief"),
                     ChatMessage(role="user", content="Ok?")],
                )
            )

        assert "".join(c.content for c in chunks) == "Yes!"
        kwargs = client_cls.return_value.chat.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Ok?"},
        ]
        assert kwargs["stream"] is True


class TestEmbed:
    def test_first_vector_returned(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.embed.return_value = {"embeddings": [[1, 2.5]]}
            vector = OllamaAdapter().embed("nomic-embed-text", "text")
        assert vector == [1.0, 2.5]

    def test_deadline_client_closed(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.embed.return_value = {"embeddings": [[0.5]]}
            OllamaAdapter(timeout=300).embed(
                "nomic-embed-text", "text", ctx=CallContext.with_timeout(2),
            )
        client_cls.return_value._client.close.assert_called_once_with()

    def test_empty_embeddings(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.embed.return_value = {"embeddings": []}
            with pytest.raises(InferenceError, match="no embedding"):
                OllamaAdapter().embed("nomic-embed-text", "text")

    def test_sdk_error_wrapped(self):
        with patch("ollama.Client") as client_cls:
            client_cls.return_value.embed.side_effect = RuntimeError("404")
            with pytest.raises(InferenceError, match="embed failed"):
                OllamaAdapter().embed("missing", "text")


class TestProviderName:
    def test_name(self):
        assert OllamaAdapter().provider_name == "ollama"
