# src/engine/task_store.py — v1
"""Task table: every task the executor has seen, keyed by id.

Reads return copies. The executor owns the stored object and changes it
through update(), so a reader never sees half of a status transition.
"""

from __future__ import annotations

from typing import Any

from agentweave.core.errors import TaskNotFoundError
from agentweave.core.locks import ReadWriteLock
from agentweave.core.models import Task


class TaskStore:
    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tasks)

    def put(self, task: Task) -> None:
        with self._lock.write():
            self._tasks[task.id] = task

    def update(self, task: Task, **fields: Any) -> None:
        """Assign several fields on a stored task as one step for readers."""
        with self._lock.write():
            for name, value in fields.items():
                setattr(task, name, value)

    def get(self, task_id: str) -> Task:
        with self._lock.read():
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            return task.model_copy(deep=True)

    def list(self, agent_id: str | None = None) -> list[Task]:
        """Snapshots of all tasks (optionally one agent's), oldest first."""
        with self._lock.read():
            tasks = [
                t.model_copy(deep=True)
                for t in self._tasks.values()
                if agent_id is None or t.agent_id == agent_id
            ]
        return sorted(tasks, key=lambda t: t.created_at)
