# src/tracking/models.py — v1
"""Tracking domain models: per-agent task statistics."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AgentTaskStats(BaseModel):
    """Aggregated task outcomes for one agent."""

    agent_id: str
    total_tasks: int = 0
    completed: int = 0
    failed: int = 0
    in_progress: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    avg_duration_ms: float = 0.0
    max_duration_ms: float = 0.0

    @property
    def failure_rate(self) -> float:
        finished = self.completed + self.failed
        return self.failed / finished if finished else 0.0
