# src/capabilities/registry.py — v1
"""Capability registry: name-keyed tables of tools and plugins.

Pure lookup; no lifecycle beyond registration. Built-ins are loaded from
the class paths in config/agents.py. Reads share the lock, registration
takes it exclusively.
"""

from __future__ import annotations

import importlib
import logging

from agentweave.capabilities.base import BasePlugin, BaseTool
from agentweave.config.agents import BUILTIN_PLUGINS, BUILTIN_TOOLS
from agentweave.core.errors import CapabilityNotFoundError
from agentweave.core.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when a capability class cannot be loaded."""


class CapabilityRegistry:
    """Registry of all available tools and plugins."""

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}
        self._plugins: dict[str, BasePlugin] = {}
        self._lock = ReadWriteLock()

    # --- Registration ---

    def register_tool(self, tool: BaseTool) -> None:
        with self._lock.write():
            if tool.name in self._tools:
                logger.warning("Overwriting existing tool: %s", tool.name)
            self._tools[tool.name] = tool
        logger.info("Registered tool: %s", tool.name)

    def register_plugin(self, plugin: BasePlugin) -> None:
        with self._lock.write():
            if plugin.name in self._plugins:
                logger.warning("Overwriting existing plugin: %s", plugin.name)
            self._plugins[plugin.name] = plugin
        logger.info("Registered plugin: %s", plugin.name)

    def load_builtins(self) -> None:
        """Register every built-in tool and plugin from config."""
        for class_path in BUILTIN_TOOLS:
            tool = _import_capability(class_path, BaseTool)
            self.register_tool(tool)  # type: ignore[arg-type]
        for class_path in BUILTIN_PLUGINS:
            plugin = _import_capability(class_path, BasePlugin)
            self.register_plugin(plugin)  # type: ignore[arg-type]

    # --- Lookup ---

    def get_tool(self, name: str) -> BaseTool | None:
        """Get tool by name, or None if not registered."""
        with self._lock.read():
            return self._tools.get(name)

    def get_plugin(self, name: str) -> BasePlugin | None:
        """Get plugin by name, or None if not registered."""
        with self._lock.read():
            return self._plugins.get(name)

    def get_tool_or_raise(self, name: str) -> BaseTool:
        tool = self.get_tool(name)
        if tool is None:
            raise CapabilityNotFoundError(name, f"tool not found: {name}")
        return tool

    def get_plugin_or_raise(self, name: str) -> BasePlugin:
        plugin = self.get_plugin(name)
        if plugin is None:
            raise CapabilityNotFoundError(name, f"plugin not found: {name}")
        return plugin

    @property
    def tool_names(self) -> list[str]:
        """Sorted list of registered tool names."""
        with self._lock.read():
            return sorted(self._tools)

    @property
    def plugin_names(self) -> list[str]:
        """Sorted list of registered plugin names."""
        with self._lock.read():
            return sorted(self._plugins)

    def describe(self) -> dict[str, dict[str, str]]:
        """Return {"tools": {name: description}, "plugins": {...}}."""
        with self._lock.read():
            return {
                "tools": {n: t.description for n, t in sorted(self._tools.items())},
                "plugins": {n: p.description for n, p in sorted(self._plugins.items())},
            }


def register_default_capabilities(registry: CapabilityRegistry) -> CapabilityRegistry:
    """Register the built-in tools and plugins on `registry` and return it."""
    registry.load_builtins()
    return registry


def _import_capability(class_path: str, base: type) -> BaseTool | BasePlugin:
    """Import and instantiate a capability from a dotted class path."""
    parts = class_path.rsplit(".", 1)
    if len(parts) != 2:
        raise RegistryError(f"Invalid class path: {class_path}")
    module_path, class_name = parts

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise RegistryError(f"Cannot import module {module_path}: {exc}") from exc

    cls = getattr(module, class_name, None)
    if cls is None:
        raise RegistryError(f"Class {class_name} not found in {module_path}")

    if not isinstance(cls, type) or not issubclass(cls, base):
        raise RegistryError(f"{class_path} is not a {base.__name__} subclass")

    return cls()
