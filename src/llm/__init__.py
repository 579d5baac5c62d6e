# src/llm/__init__.py — v1
"""Inference client contract, adapters and factory."""
