# src/store/base_entity_store.py — v1
"""Abstract entity store interface.

Implementations are injected into the query engine. Every call is scoped:
a store must never return an entity whose owner_scope differs from the
scope it was asked for.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kgtraverse.core.models import Entity


class BaseEntityStore(ABC):
    """Read interface over scoped entity records."""

    @abstractmethod
    async def find_by_id(self, scope: str, entity_id: str) -> Entity | None:
        """Return the entity, or None if it does not exist in scope."""

    @abstractmethod
    async def find_many(self, scope: str, *, limit: int) -> list[Entity]:
        """Return up to limit entities owned by scope, in a stable order."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Backend identifier (memory, networkx, ...)."""
