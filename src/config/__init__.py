# src/config/__init__.py — v1
"""Settings and declarative agent/capability configuration."""
