# src/llm/adapters/__init__.py — v1
"""Inference provider adapters."""
