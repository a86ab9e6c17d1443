# src/store/memory_store.py — v1
"""Dict-backed in-memory entity and relation stores (STORE_BACKEND=memory).

Records are partitioned by owner_scope and kept in insertion order.
Intended for tests, the CLI and small embedded graphs.
"""

from __future__ import annotations

from collections.abc import Iterable

from kgtraverse.core.models import Entity, Relation
from kgtraverse.store.base_entity_store import BaseEntityStore
from kgtraverse.store.base_relation_store import BaseRelationStore


class InMemoryEntityStore(BaseEntityStore):
    """Entity store holding records in per-scope dicts."""

    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        self._by_scope: dict[str, dict[str, Entity]] = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity: Entity) -> None:
        """Insert or replace an entity (merge by scope + id)."""
        self._by_scope.setdefault(entity.owner_scope, {})[entity.id] = entity

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._by_scope.values())

    async def find_by_id(self, scope: str, entity_id: str) -> Entity | None:
        return self._by_scope.get(scope, {}).get(entity_id)

    async def find_many(self, scope: str, *, limit: int) -> list[Entity]:
        return list(self._by_scope.get(scope, {}).values())[:limit]

    @property
    def provider_name(self) -> str:
        return "memory"


class InMemoryRelationStore(BaseRelationStore):
    """Relation store with a per-scope endpoint index."""

    def __init__(self, relations: Iterable[Relation] = ()) -> None:
        self._by_scope: dict[str, dict[str, Relation]] = {}
        # (scope, entity_id) -> relation ids touching that entity, insertion order
        self._endpoint_index: dict[tuple[str, str], list[str]] = {}
        for relation in relations:
            self.add(relation)

    def add(self, relation: Relation) -> None:
        """Insert or replace a relation (merge by scope + id)."""
        bucket = self._by_scope.setdefault(relation.owner_scope, {})
        previous = bucket.get(relation.id)
        bucket[relation.id] = relation
        endpoints = {relation.source_id, relation.target_id}

        if previous is None:
            for endpoint in endpoints:
                self._endpoint_index.setdefault(
                    (relation.owner_scope, endpoint), []
                ).append(relation.id)
            return

        if endpoints == {previous.source_id, previous.target_id}:
            return

        # Moved endpoints: keep each endpoint list in bucket (find_by_user) order
        self._unindex(previous)
        position = {rid: i for i, rid in enumerate(bucket)}
        for endpoint in endpoints:
            ids = self._endpoint_index.setdefault((relation.owner_scope, endpoint), [])
            ids.append(relation.id)
            ids.sort(key=position.__getitem__)

    def _unindex(self, relation: Relation) -> None:
        for endpoint in {relation.source_id, relation.target_id}:
            ids = self._endpoint_index.get((relation.owner_scope, endpoint), [])
            if relation.id in ids:
                ids.remove(relation.id)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._by_scope.values())

    async def find_by_user(self, scope: str, *, limit: int) -> list[Relation]:
        return list(self._by_scope.get(scope, {}).values())[:limit]

    async def find_by_entity(
        self, scope: str, entity_id: str, *, limit: int | None = None
    ) -> list[Relation]:
        bucket = self._by_scope.get(scope, {})
        ids = self._endpoint_index.get((scope, entity_id), [])
        relations = [bucket[rid] for rid in ids]
        return relations if limit is None else relations[:limit]

    @property
    def provider_name(self) -> str:
        return "memory"
