# src/store/store_factory.py — v1
"""Factory: instantiate the entity/relation store pair from configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kgtraverse.config.settings import Settings
from kgtraverse.core.models import Entity, Relation
from kgtraverse.store.base_entity_store import BaseEntityStore
from kgtraverse.store.base_relation_store import BaseRelationStore

logger = logging.getLogger(__name__)


class UnsupportedStoreError(ValueError):
    """Raised when a store backend is not supported."""


def create_stores(
    settings: Settings,
    entities: Iterable[Entity] | None = None,
    relations: Iterable[Relation] | None = None,
) -> tuple[BaseEntityStore, BaseRelationStore]:
    """Instantiate the configured store backend.

    Records are taken from ``entities``/``relations`` when given, otherwise
    from SNAPSHOT_PATH if set, otherwise the stores start empty.

    Returns:
        (entity_store, relation_store). Both may be the same object.

    Raises:
        UnsupportedStoreError: If the backend is not supported.
    """
    backend = settings.store_backend

    if entities is None and relations is None and settings.snapshot_path is not None:
        from kgtraverse.store.snapshot_loader import load_snapshot

        entities, relations = load_snapshot(settings.snapshot_path)

    entities = list(entities or [])
    relations = list(relations or [])

    if backend == "memory":
        from kgtraverse.store.memory_store import (
            InMemoryEntityStore,
            InMemoryRelationStore,
        )

        logger.debug("Using in-memory stores")
        return InMemoryEntityStore(entities), InMemoryRelationStore(relations)

    if backend == "networkx":
        from kgtraverse.store.networkx_store import NetworkXGraphStore

        logger.debug("Using NetworkX graph store")
        store = NetworkXGraphStore(entities, relations)
        return store, store

    raise UnsupportedStoreError(
        f"Unsupported store backend: {backend!r}. Available: memory, networkx"
    )
