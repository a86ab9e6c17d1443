# src/store/networkx_store.py — v1
"""NetworkX-backed graph store (STORE_BACKEND=networkx).

One MultiDiGraph per scope. Entities live in the ``entity`` node attribute,
relations in the ``relation`` edge attribute keyed by relation id. A
relation pointing at a missing entity creates a bare node without an
``entity`` attribute, which reads back as not found.
"""

from __future__ import annotations

from collections.abc import Iterable

import networkx as nx

from kgtraverse.core.models import Entity, Relation
from kgtraverse.store.base_entity_store import BaseEntityStore
from kgtraverse.store.base_relation_store import BaseRelationStore


class NetworkXGraphStore(BaseEntityStore, BaseRelationStore):
    """Serves both store interfaces from in-process NetworkX graphs."""

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        relations: Iterable[Relation] = (),
    ) -> None:
        self._graphs: dict[str, nx.MultiDiGraph] = {}
        # scope -> relation id -> (source_id, target_id) of its current edge
        self._edge_index: dict[str, dict[str, tuple[str, str]]] = {}
        for entity in entities:
            self.add_entity(entity)
        for relation in relations:
            self.add_relation(relation)

    def graph_for(self, scope: str) -> nx.MultiDiGraph:
        """Return the scope's graph, creating an empty one if needed."""
        graph = self._graphs.get(scope)
        if graph is None:
            graph = nx.MultiDiGraph(scope=scope)
            self._graphs[scope] = graph
        return graph

    def add_entity(self, entity: Entity) -> None:
        self.graph_for(entity.owner_scope).add_node(entity.id, entity=entity)

    def add_relation(self, relation: Relation) -> None:
        """Insert or replace a relation (merge by scope + id)."""
        graph = self.graph_for(relation.owner_scope)
        edges = self._edge_index.setdefault(relation.owner_scope, {})
        previous = edges.get(relation.id)
        if previous is not None:
            graph.remove_edge(*previous, key=relation.id)
        graph.add_edge(
            relation.source_id, relation.target_id, key=relation.id, relation=relation
        )
        edges[relation.id] = (relation.source_id, relation.target_id)

    # --- BaseEntityStore ---

    async def find_by_id(self, scope: str, entity_id: str) -> Entity | None:
        graph = self._graphs.get(scope)
        if graph is None or entity_id not in graph:
            return None
        return graph.nodes[entity_id].get("entity")

    async def find_many(self, scope: str, *, limit: int) -> list[Entity]:
        graph = self._graphs.get(scope)
        if graph is None:
            return []
        entities = [
            entity for _, entity in graph.nodes(data="entity") if entity is not None
        ]
        return entities[:limit]

    # --- BaseRelationStore ---

    async def find_by_user(self, scope: str, *, limit: int) -> list[Relation]:
        graph = self._graphs.get(scope)
        if graph is None:
            return []
        return [rel for _, _, rel in graph.edges(data="relation")][:limit]

    async def find_by_entity(
        self, scope: str, entity_id: str, *, limit: int | None = None
    ) -> list[Relation]:
        graph = self._graphs.get(scope)
        if graph is None or entity_id not in graph:
            return []
        relations: list[Relation] = [
            rel for _, _, rel in graph.out_edges(entity_id, data="relation")
        ]
        # Self-loops show up in both out_edges and in_edges
        relations.extend(
            rel
            for src, _, rel in graph.in_edges(entity_id, data="relation")
            if src != entity_id
        )
        return relations if limit is None else relations[:limit]

    @property
    def provider_name(self) -> str:
        return "networkx"
