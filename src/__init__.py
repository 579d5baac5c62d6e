# src/__init__.py — v1
"""agentweave: multi-agent task orchestration over a local LLM inference service."""

from agentweave.version import __version__

__all__ = ["__version__"]
