# src/core/__init__.py — v1
"""Domain models, errors, cancellation and locking primitives."""
