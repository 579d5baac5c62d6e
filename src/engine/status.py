# src/engine/status.py — v1
"""Read-only system status snapshot and its pluggable provider.

The engine displays whatever the provider reports; no control decision
depends on it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from agentweave.core.models import utcnow

if TYPE_CHECKING:
    from agentweave.engine.orchestrator import Engine


class SystemStatus(BaseModel):
    health: str = "healthy"
    coherence: float = 1.0
    counters: dict[str, int] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=utcnow)


class StatusProvider(ABC):
    """Source of the status snapshot shown by Engine.status()."""

    @abstractmethod
    def snapshot(self, engine: Engine) -> SystemStatus:
        """Return the current status; must not mutate the engine."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""


class EngineStatusProvider(StatusProvider):
    """Default provider: engine counters only, constant coherence."""

    def snapshot(self, engine: Engine) -> SystemStatus:
        return SystemStatus(
            health="healthy",
            coherence=1.0,
            counters=engine.counters(),
        )

    @property
    def provider_name(self) -> str:
        return "engine"
