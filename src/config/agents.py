# src/config/agents.py — v1
"""Declarative capability and agent-profile configuration.

Built-in tools and plugins are listed by fully qualified class path and
imported lazily by capabilities/registry.py. Agent profiles drive
Engine.create_specialized_agent().
"""

from __future__ import annotations

from typing import Any

# Fully qualified class paths for dynamic import by capabilities/registry.py.
BUILTIN_TOOLS: list[str] = [
    "agentweave.capabilities.builtin.calculator.CalculatorTool",
    "agentweave.capabilities.builtin.clock.ClockTool",
]

BUILTIN_PLUGINS: list[str] = [
    "agentweave.capabilities.builtin.data_analysis.DataAnalysisPlugin",
    "agentweave.capabilities.builtin.text_transform.TextTransformPlugin",
]

# Per agent type: name/description templates ({domain} is substituted),
# initial goals and capabilities, declared tools.
AGENT_TYPE_PROFILES: dict[str, dict[str, Any]] = {
    "general": {
        "name": "{domain}-agent",
        "description": "General-purpose agent for {domain} tasks",
        "goals": ["complete assigned {domain} tasks"],
        "capabilities": ["generate", "chat"],
        "tools": ["clock"],
    },
    "specialist": {
        "name": "{domain}-specialist",
        "description": "Specialist agent with domain expertise in {domain}",
        "goals": ["apply {domain} expertise", "produce precise answers"],
        "capabilities": ["generate", "chat", "tool"],
        "tools": ["calculator", "clock"],
    },
    "orchestrator": {
        "name": "{domain}-orchestrator",
        "description": "Orchestrator agent coordinating {domain} work across agents",
        "goals": ["distribute {domain} work", "collect results from other agents"],
        "capabilities": ["chat", "plugin", "delegate"],
        "tools": ["clock"],
    },
    "reflective": {
        "name": "{domain}-reflector",
        "description": "Reflective agent analysing its own {domain} performance",
        "goals": ["review recent {domain} interactions", "suggest improvements"],
        "capabilities": ["reflect", "plugin", "chat"],
        "tools": [],
    },
}
