# src/logging/__init__.py — v1
"""Structured logging and per-thread log context."""
