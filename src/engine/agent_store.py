# src/engine/agent_store.py — v1
"""Agent store: CRUD registry of live Agent objects.

A single reader/writer lock guards the table and every in-place state
update. Contention is expected to be light, so there is no per-agent
locking. Agents returned by get()/list() are the stored objects.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from agentweave.core.errors import AgentNotFoundError, InvalidRequestError
from agentweave.core.locks import ReadWriteLock
from agentweave.core.models import Agent, new_id, utcnow

logger = logging.getLogger(__name__)


class AgentStore:
    """Registry of agents keyed by id."""

    def __init__(self) -> None:
        self._agents: dict[str, Agent] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._agents)

    def create(self, agent: Agent) -> Agent:
        """Store `agent`, assigning an id and default state when absent."""
        with self._lock.write():
            if not agent.id:
                agent.id = new_id()
            elif agent.id in self._agents:
                raise InvalidRequestError(f"agent already exists: {agent.id}")
            agent.ensure_state()
            now = utcnow()
            agent.created_at = now
            agent.updated_at = now
            self._agents[agent.id] = agent
        logger.info("Created agent %s (%s)", agent.id, agent.name)
        return agent

    def get(self, agent_id: str) -> Agent:
        """Return the agent or raise AgentNotFoundError."""
        with self._lock.read():
            agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    def find(self, agent_id: str) -> Agent | None:
        with self._lock.read():
            return self._agents.get(agent_id)

    def list(self) -> list[Agent]:
        """All agents, no ordering guarantee."""
        with self._lock.read():
            return list(self._agents.values())

    def update(self, agent: Agent) -> Agent:
        """Replace the stored agent with the same id; UpdatedAt strictly advances."""
        with self._lock.write():
            previous = self._agents.get(agent.id)
            if previous is None:
                raise AgentNotFoundError(agent.id)
            now = utcnow()
            if previous.updated_at is not None and now <= previous.updated_at:
                now = previous.updated_at + timedelta(microseconds=1)
            if agent.created_at is None:
                agent.created_at = previous.created_at
            agent.ensure_state()
            agent.updated_at = now
            self._agents[agent.id] = agent
        logger.info("Updated agent %s (%s)", agent.id, agent.name)
        return agent

    def delete(self, agent_id: str) -> None:
        with self._lock.write():
            if agent_id not in self._agents:
                raise AgentNotFoundError(agent_id)
            del self._agents[agent_id]
        logger.info("Deleted agent %s", agent_id)

    def record(self, agent: Agent, key: str, value: Any) -> None:
        """Record an interaction in the agent's memory and context window."""
        with self._lock.write():
            agent.ensure_state().record(key, value)
