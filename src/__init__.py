# src/__init__.py — v1
"""kgtraverse: read-only, tenant-scoped knowledge graph traversal."""

from kgtraverse.version import __version__

__all__ = ["__version__"]
