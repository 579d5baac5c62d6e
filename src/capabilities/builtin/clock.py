# src/capabilities/builtin/clock.py — v1
"""Current UTC time tool."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from agentweave.capabilities.base import BaseTool
from agentweave.core.models import ToolResult


class ClockTool(BaseTool):
    @property
    def name(self) -> str:
        return "clock"

    @property
    def description(self) -> str:
        return "Current UTC time, ISO-8601 or a strftime `format`"

    def call(self, parameters: dict[str, Any]) -> ToolResult:
        now = datetime.now(timezone.utc)
        fmt = parameters.get("format")
        if not fmt:
            return ToolResult(success=True, output=now.isoformat())
        try:
            return ToolResult(success=True, output=now.strftime(str(fmt)))
        except ValueError as exc:
            return ToolResult(success=False, error=f"invalid format {fmt!r}: {exc}")
