# src/llm/models.py — v1
"""Inference-specific types: ChatMessage, StreamChunk.

Kept apart from core.models because only the inference layer and the
executor exchange them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """Single message in a chat request."""

    role: Literal["user", "assistant", "system"]
    content: str


class StreamChunk(BaseModel):
    """One piece of a streamed generate/chat response.

    Token counts are only reported on the final (`done`) chunk.
    """

    content: str = ""
    done: bool = False
    input_tokens: int | None = None
    output_tokens: int | None = None
