# src/tracking/task_stats.py — v1
"""Per-agent aggregation of task records.

Durations are measured from creation to completion, so only tasks that
reached a completion timestamp contribute to them.
"""

from __future__ import annotations

from collections import Counter, defaultdict

from agentweave.core.models import Task, TaskStatus
from agentweave.tracking.models import AgentTaskStats


def aggregate_by_agent(tasks: list[Task]) -> dict[str, AgentTaskStats]:
    """Aggregate task records into per-agent statistics.

    Args:
        tasks: Task snapshots, typically from the engine's task table.

    Returns:
        Dict mapping agent id to AgentTaskStats.
    """
    grouped: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        grouped[task.agent_id].append(task)

    result: dict[str, AgentTaskStats] = {}
    for agent_id, agent_tasks in grouped.items():
        statuses = Counter(t.status for t in agent_tasks)
        durations = [
            (t.completed_at - t.created_at).total_seconds() * 1000
            for t in agent_tasks
            if t.completed_at is not None
        ]
        result[agent_id] = AgentTaskStats(
            agent_id=agent_id,
            total_tasks=len(agent_tasks),
            completed=statuses[TaskStatus.COMPLETED],
            failed=statuses[TaskStatus.FAILED],
            in_progress=statuses[TaskStatus.PENDING] + statuses[TaskStatus.RUNNING],
            by_type=dict(Counter(t.type for t in agent_tasks)),
            avg_duration_ms=sum(durations) / len(durations) if durations else 0.0,
            max_duration_ms=max(durations) if durations else 0.0,
        )
    return result
