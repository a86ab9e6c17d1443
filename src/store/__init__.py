# src/store/__init__.py — v1
"""Entity and relation store interfaces and reference backends."""
