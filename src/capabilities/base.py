# src/capabilities/base.py — v1
"""Standard interfaces for tools and plugins.

A Tool is a narrow, parameterised capability returning a ToolResult.
A Plugin takes free input text plus parameters and returns any value,
raising on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from agentweave.core.models import ToolResult


class BaseTool(ABC):
    """Standard interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool identifier (e.g., 'calculator')."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this tool does."""

    @abstractmethod
    def call(self, parameters: dict[str, Any]) -> ToolResult:
        """Run the tool. Report expected failures via ToolResult.success."""


class BasePlugin(ABC):
    """Standard interface for all plugins."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique plugin identifier (e.g., 'data_analysis')."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this plugin does."""

    @abstractmethod
    def execute(self, input_text: str, parameters: dict[str, Any]) -> Any:
        """Run the plugin on `input_text`. Raise on failure."""
