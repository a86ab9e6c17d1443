# src/store/base_relation_store.py — v1
"""Abstract relation store interface.

Relations may reference entities that no longer exist; stores return them
as-is and leave the skipping to callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kgtraverse.core.models import Relation


class BaseRelationStore(ABC):
    """Read interface over scoped relation records."""

    @abstractmethod
    async def find_by_user(self, scope: str, *, limit: int) -> list[Relation]:
        """Return up to limit relations owned by scope, in a stable order."""

    @abstractmethod
    async def find_by_entity(
        self, scope: str, entity_id: str, *, limit: int | None = None
    ) -> list[Relation]:
        """Return relations where entity_id is the source or the target."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Backend identifier (memory, networkx, ...)."""
