# src/query/__init__.py — v1
"""Graph query engine."""
