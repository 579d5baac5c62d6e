# src/capabilities/builtin/__init__.py — v1
"""Built-in tools and plugins."""
