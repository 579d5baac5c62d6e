# src/logging/context.py — v1
"""Contextual logging support: attach agent, task and conversation ids to log records.

Context variables are per thread; worker threads set their own context.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_agent_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "agent_id", default=None
)
_task_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task_id", default=None
)
_conversation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "conversation_id", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    agent_id: str | None = None
    task_id: str | None = None
    conversation_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        agent_id=_agent_id.get(),
        task_id=_task_id.get(),
        conversation_id=_conversation_id.get(),
    )


def set_task_context(agent_id: str | None, task_id: str | None) -> None:
    """Set task-level context (called per task execution)."""
    _agent_id.set(agent_id)
    _task_id.set(task_id)


def set_conversation_context(conversation_id: str | None) -> None:
    _conversation_id.set(conversation_id)


def clear_context() -> None:
    """Reset all context variables."""
    _agent_id.set(None)
    _task_id.set(None)
    _conversation_id.set(None)


@contextmanager
def log_context(
    agent_id: str | None = None,
    task_id: str | None = None,
    conversation_id: str | None = None,
) -> Iterator[LogContext]:
    """Temporarily set the given fields, restoring previous values on exit.

    Fields passed as None keep their current value.
    """
    tokens = []
    if agent_id is not None:
        tokens.append((_agent_id, _agent_id.set(agent_id)))
    if task_id is not None:
        tokens.append((_task_id, _task_id.set(task_id)))
    if conversation_id is not None:
        tokens.append((_conversation_id, _conversation_id.set(conversation_id)))
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
