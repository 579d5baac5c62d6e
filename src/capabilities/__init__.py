# src/capabilities/__init__.py — v1
"""Tool and plugin contracts, registry and built-ins."""
