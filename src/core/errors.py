# src/core/errors.py — v1
"""Orchestration error taxonomy.

NotFound and InvalidRequest are caller mistakes and are never retried.
ExecutionError covers failures of the work itself (inference backend,
tool or plugin). An unregistered tool/plugin is not an error: the task
completes with an output stating the capability is unavailable.
"""

from __future__ import annotations


class OrchestrationError(Exception):
    """Base class for every error raised by the orchestration core."""


# === NOT FOUND ===


class NotFoundError(OrchestrationError):
    """A referenced entity does not exist."""

    kind = "entity"

    def __init__(self, entity_id: str, message: str | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(message or f"{self.kind} not found: {entity_id}")


class AgentNotFoundError(NotFoundError):
    kind = "agent"


class ConversationNotFoundError(NotFoundError):
    kind = "conversation"


class TaskNotFoundError(NotFoundError):
    kind = "task"


class CapabilityNotFoundError(NotFoundError):
    """Raised by strict registry lookups (tool or plugin)."""

    kind = "capability"


# === INVALID REQUEST ===


class InvalidRequestError(OrchestrationError):
    """A required field is missing or a precondition is violated."""


class NoModelSpecifiedError(InvalidRequestError):
    """Neither the task nor its agent names a model."""

    def __init__(self, task_type: str) -> None:
        self.task_type = task_type
        super().__init__(f"no model specified for {task_type} task")


# === EXECUTION ===


class ExecutionError(OrchestrationError):
    """The requested work was attempted and failed."""

    def __init__(self, message: str, task_id: str | None = None) -> None:
        self.task_id = task_id
        super().__init__(message)


class InferenceError(ExecutionError):
    """The inference backend rejected or failed a call."""


class CapabilityExecutionError(ExecutionError):
    """A registered tool or plugin failed."""


class TaskCancelledError(ExecutionError):
    """The call context was cancelled or its deadline passed."""
