# src/capabilities/builtin/text_transform.py — v1
"""Text transformation plugin."""

from __future__ import annotations

from typing import Any, Callable

from agentweave.capabilities.base import BasePlugin

_MODES: dict[str, Callable[[str], str]] = {
    "upper": str.upper,
    "lower": str.lower,
    "title": str.title,
    "reverse": lambda s: s[::-1],
    "strip": str.strip,
}


class TextTransformPlugin(BasePlugin):
    @property
    def name(self) -> str:
        return "text_transform"

    @property
    def description(self) -> str:
        return "Transform input text: mode=upper | lower | title | reverse | strip"

    def execute(self, input_text: str, parameters: dict[str, Any]) -> Any:
        mode = str(parameters.get("mode", "strip"))
        fn = _MODES.get(mode)
        if fn is None:
            raise ValueError(f"unsupported transform mode: {mode!r}")
        return fn(input_text)
