# src/engine/routing.py — v1
"""Best-effort model routing heuristic.

Resolution order:
  1. Input mentions code/function/programming -> first model whose name contains "code"
  2. Chat task -> first model that is not code-flavoured
  3. agent.config["default_model"] when it is one of the agent's models
  4. The agent's first model
"""

from __future__ import annotations

from agentweave.core.models import Agent, TaskType

_CODE_HINTS = ("code", "function", "programming")


def _is_code_model(model: str) -> bool:
    return "code" in model.lower()


def select_model(agent: Agent, task_type: str | TaskType, text: str) -> str:
    """Pick a model for a task; empty string when the agent declares none."""
    if not agent.models:
        return ""

    lowered = text.lower()
    if any(hint in lowered for hint in _CODE_HINTS):
        for model in agent.models:
            if _is_code_model(model):
                return model

    if TaskType.parse(task_type) is TaskType.CHAT:
        for model in agent.models:
            if not _is_code_model(model):
                return model

    default = agent.config.get("default_model")
    if isinstance(default, str) and default in agent.models:
        return default

    return agent.models[0]
