# src/llm/base_client.py — v1
"""Abstract inference client interface.

The orchestration core only ever talks to the inference backend through
this contract. Implementations must honour the CallContext: stop
streaming once it is cancelled and bound blocking I/O by its deadline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterator

from agentweave.llm.models import ChatMessage, StreamChunk

if TYPE_CHECKING:
    from agentweave.core.cancellation import CallContext


class BaseInferenceClient(ABC):
    """Unified interface for inference providers."""

    @abstractmethod
    def generate(
        self,
        model: str,
        prompt: str,
        options: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Iterator[StreamChunk]:
        """Stream a completion for a raw prompt."""

    @abstractmethod
    def chat(
        self,
        model: str,
        messages: list[ChatMessage],
        options: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Iterator[StreamChunk]:
        """Stream the assistant reply to an ordered list of messages."""

    @abstractmethod
    def embed(
        self,
        model: str,
        text: str,
        ctx: CallContext | None = None,
    ) -> list[float]:
        """Return the embedding vector of `text`."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. ollama)."""
