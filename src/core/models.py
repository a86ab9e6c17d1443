# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

Entities and relations are read-only records supplied by the stores.
GraphView, PathView and Neighbor are engine outputs, built fresh per call.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, JsonValue

if TYPE_CHECKING:
    import networkx as nx


# === STORED RECORDS ===


class Entity(BaseModel):
    """A typed, named node owned by exactly one scope."""

    model_config = ConfigDict(frozen=True)

    id: str
    owner_scope: str
    type: str
    name: str
    properties: dict[str, JsonValue] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Relation(BaseModel):
    """A typed, directed edge (source -> target) between two entities.

    Either endpoint may reference an entity that no longer exists.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    owner_scope: str
    source_id: str
    target_id: str
    type: str
    properties: dict[str, JsonValue] = Field(default_factory=dict)
    confidence: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def touches(self, entity_id: str) -> bool:
        return self.source_id == entity_id or self.target_id == entity_id

    def other_end(self, entity_id: str) -> str:
        """Return the endpoint opposite to entity_id.

        For a self-loop both endpoints are entity_id.
        """
        return self.target_id if self.source_id == entity_id else self.source_id


# === ENGINE OUTPUTS ===


class GraphView(BaseModel):
    """Nodes and edges returned by a query; ids are unique in each list."""

    nodes: list[Entity] = Field(default_factory=list)
    edges: list[Relation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def edge_ids(self) -> list[str]:
        return [e.id for e in self.edges]

    def to_networkx(self) -> nx.MultiDiGraph:
        """Build a directed multigraph; edge keys are relation ids."""
        import networkx as nx

        graph = nx.MultiDiGraph()
        for node in self.nodes:
            graph.add_node(
                node.id, type=node.type, name=node.name, properties=node.properties
            )
        for edge in self.edges:
            graph.add_edge(
                edge.source_id,
                edge.target_id,
                key=edge.id,
                type=edge.type,
                confidence=edge.confidence,
                properties=edge.properties,
            )
        return graph


class PathView(BaseModel):
    """Ordered source -> target path.

    edges[i] connects nodes[i] and nodes[i + 1], in either stored direction.
    """

    nodes: list[Entity]
    edges: list[Relation] = Field(default_factory=list)

    @property
    def length(self) -> int:
        """Number of hops."""
        return len(self.edges)

    @property
    def source(self) -> Entity:
        return self.nodes[0]

    @property
    def target(self) -> Entity:
        return self.nodes[-1]


class Neighbor(BaseModel):
    """One relation touching an entity, paired with its other endpoint."""

    relation: Relation
    entity: Entity
