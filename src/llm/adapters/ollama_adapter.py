# src/llm/adapters/ollama_adapter.py — v1
"""Ollama local inference adapter implementing BaseInferenceClient.

Uses the ollama Python SDK in streaming mode. SDK and transport failures
surface as InferenceError; cancellation is checked between chunks.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

from agentweave.core.errors import InferenceError, TaskCancelledError
from agentweave.llm.base_client import BaseInferenceClient
from agentweave.llm.models import ChatMessage, StreamChunk

if TYPE_CHECKING:
    from agentweave.core.cancellation import CallContext


class OllamaAdapter(BaseInferenceClient):
    """Ollama local inference adapter."""

    def __init__(
        self,
        host: str = "http://localhost:11434",
        timeout: float = 300.0,
        **kwargs: Any,
    ):
        self._host = host
        self._timeout = timeout
        self._client: Any = None

    def generate(
        self,
        model: str,
        prompt: str,
        options: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Iterator[StreamChunk]:
        with self._session(ctx) as client:
            try:
                stream = client.generate(
                    model=model, prompt=prompt, options=options or None, stream=True,
                )
                for part in stream:
                    if ctx is not None:
                        ctx.check()
                    yield _to_chunk(part, part.get("response", ""))
            except TaskCancelledError:
                raise
            except Exception as exc:
                raise InferenceError(
                    f"ollama generate failed for model {model!r}: {exc}"
                ) from exc

    def chat(
        self,
        model: str,
        messages: list[ChatMessage],
        options: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Iterator[StreamChunk]:
        msgs = [{"role": m.role, "content": m.content} for m in messages]
        with self._session(ctx) as client:
            try:
                stream = client.chat(
                    model=model, messages=msgs, options=options or None, stream=True,
                )
                for part in stream:
                    if ctx is not None:
                        ctx.check()
                    message = part.get("message") or {}
                    yield _to_chunk(part, message.get("content") or "")
            except TaskCancelledError:
                raise
            except Exception as exc:
                raise InferenceError(f"ollama chat failed for model {model!r}: {exc}") from exc

    def embed(
        self,
        model: str,
        text: str,
        ctx: CallContext | None = None,
    ) -> list[float]:
        if ctx is not None:
            ctx.check()
        with self._session(ctx) as client:
            try:
                resp = client.embed(model=model, input=text)
            except Exception as exc:
                raise InferenceError(f"ollama embed failed for model {model!r}: {exc}") from exc

        embeddings = resp.get("embeddings") or []
        if not embeddings:
            raise InferenceError(f"ollama returned no embedding for model {model!r}")
        return [float(x) for x in embeddings[0]]

    @property
    def provider_name(self) -> str:
        return "ollama"

    @contextmanager
    def _session(self, ctx: CallContext | None) -> Iterator[Any]:
        """Shared client, or a one-off client whose timeout fits the deadline.

        One-off clients have their HTTP transport closed on exit.
        """
        import ollama

        remaining = ctx.remaining() if ctx is not None else None
        if remaining is not None and remaining < self._timeout:
            client = ollama.Client(host=self._host, timeout=max(remaining, 0.001))
            try:
                yield client
            finally:
                client._client.close()
            return
        if self._client is None:
            self._client = ollama.Client(host=self._host, timeout=self._timeout)
        yield self._client


def _to_chunk(part: Any, content: str) -> StreamChunk:
    done = bool(part.get("done", False))
    return StreamChunk(
        content=content,
        done=done,
        input_tokens=part.get("prompt_eval_count") if done else None,
        output_tokens=part.get("eval_count") if done else None,
    )
