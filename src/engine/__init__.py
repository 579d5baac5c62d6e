# src/engine/__init__.py — v1
"""Orchestration engine: stores, executor, workflows, conversations."""
