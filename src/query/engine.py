# src/query/engine.py — v1
"""Graph query engine: scoped snapshot, BFS traversal, shortest path, neighbors.

Usage:
    engine = GraphQueryEngine(entity_store, relation_store)
    view = await engine.traverse("tenant-1", "e1", max_depth=2)

The engine is read-only and holds no state between calls. Every call is
bound to one scope; records whose owner_scope differs are dropped even if
a store returns them.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from kgtraverse.config.settings import Settings
from kgtraverse.core.models import Entity, GraphView, Neighbor, PathView, Relation
from kgtraverse.logging.context import query_context
from kgtraverse.query.cancellation import CancellationToken
from kgtraverse.query.errors import GraphQueryError, InvalidQueryError
from kgtraverse.query.options import (
    FullGraphOptions,
    NeighborOptions,
    PathOptions,
    TraversalOptions,
    resolve_options,
    type_filter,
)
from kgtraverse.store.base_entity_store import BaseEntityStore
from kgtraverse.store.base_relation_store import BaseRelationStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Entity, Relation)


class GraphQueryEngine:
    """Composes an entity store and a relation store into read-only graph queries."""

    def __init__(
        self,
        entity_store: BaseEntityStore,
        relation_store: BaseRelationStore,
        settings: Settings | None = None,
    ) -> None:
        self._entities = entity_store
        self._relations = relation_store
        self._settings = settings or Settings()

    # --- Public API ---

    async def get_full_graph(
        self,
        scope: str,
        options: FullGraphOptions | None = None,
        *,
        limit: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> GraphView:
        """Return up to ``limit`` entities and up to ``limit`` relations of a scope.

        No traversal is done; relations may reference entities outside the
        returned node list. Callers needing more must page via the stores.
        """
        _require_scope(scope)
        opts = resolve_options(FullGraphOptions, options, {"limit": limit})
        limit = opts.limit or self._settings.full_graph_limit
        token = self._token(cancellation)

        with self._operation("get_full_graph", scope):
            token.raise_if_cancelled("get_full_graph")
            entities, relations = await asyncio.gather(
                self._entities.find_many(scope, limit=limit),
                self._relations.find_by_user(scope, limit=limit),
            )
            view = GraphView(
                nodes=_dedupe(_owned(scope, entities)),
                edges=_dedupe(_owned(scope, relations)),
            )
            logger.info(
                "Full graph: %d nodes, %d edges (limit=%d)",
                len(view.nodes), len(view.edges), limit,
            )
            return view

    async def traverse(
        self,
        scope: str,
        start_id: str,
        options: TraversalOptions | None = None,
        *,
        max_depth: int | None = None,
        entity_types: list[str] | None = None,
        relation_types: list[str] | None = None,
        limit: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> GraphView:
        """Breadth-first traversal from ``start_id`` in both edge directions.

        Nodes at ``max_depth`` are returned but not expanded. The walk stops
        as soon as ``limit`` nodes have been collected. Relations whose far
        endpoint does not resolve are skipped. Nodes and edges come back in
        discovery order, each id at most once.

        Returns:
            GraphView; empty if ``start_id`` does not exist in scope.

        Raises:
            InvalidQueryError: Negative depth or non-positive limit.
            QueryCancelledError: Token cancelled or deadline passed.
        """
        _require_scope(scope)
        opts = resolve_options(
            TraversalOptions,
            options,
            {
                "max_depth": max_depth,
                "entity_types": entity_types,
                "relation_types": relation_types,
                "limit": limit,
            },
        )
        depth_bound = (
            opts.max_depth if opts.max_depth is not None
            else self._settings.traverse_max_depth
        )
        node_limit = opts.limit or self._settings.traverse_limit
        allowed_entities = type_filter(opts.entity_types)
        allowed_relations = type_filter(opts.relation_types)
        token = self._token(cancellation)

        with self._operation("traverse", scope):
            token.raise_if_cancelled("traverse")
            resolver = _EntityResolver(self._entities, scope)
            start = await resolver.resolve(start_id)
            if start is None:
                logger.info("Traverse start %s not found", start_id)
                return GraphView()

            logger.debug(
                "Traverse from %s: max_depth=%d, limit=%d",
                start_id, depth_bound, node_limit,
            )
            visited: set[str] = {start.id}
            edge_seen: set[str] = set()
            nodes: list[Entity] = [start]
            edges: list[Relation] = []
            frontier: deque[tuple[str, int]] = deque([(start.id, 0)])
            skipped = 0

            while frontier and len(nodes) < node_limit:
                depth = frontier[0][1]
                if depth >= depth_bound:
                    break
                token.raise_if_cancelled("traverse")

                layer: list[str] = []
                while frontier and frontier[0][1] == depth:
                    layer.append(frontier.popleft()[0])

                fetched = await self._fetch_layer(scope, layer)
                for node_id, relations in zip(layer, fetched):
                    for rel in relations:
                        if rel.id in edge_seen:
                            continue
                        if allowed_relations is not None and rel.type not in allowed_relations:
                            continue

                        other_id = rel.other_end(node_id)
                        other = await resolver.resolve(other_id)
                        if other is None:
                            skipped += 1
                            continue
                        if (
                            other_id not in visited
                            and allowed_entities is not None
                            and other.type not in allowed_entities
                        ):
                            continue

                        edge_seen.add(rel.id)
                        edges.append(rel)
                        if other_id in visited:
                            continue

                        visited.add(other_id)
                        nodes.append(other)
                        if len(nodes) >= node_limit:
                            break
                        frontier.append((other_id, depth + 1))

                    if len(nodes) >= node_limit:
                        break

            if skipped:
                logger.debug("Traverse skipped %d dangling relations", skipped)
            logger.info("Traverse from %s: %d nodes, %d edges", start_id, len(nodes), len(edges))
            return GraphView(nodes=nodes, edges=edges)

    async def find_path(
        self,
        scope: str,
        source_id: str,
        target_id: str,
        max_depth: int | None = None,
        *,
        relation_types: list[str] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> PathView | None:
        """Find a minimum-hop path between two entities, ignoring edge direction.

        Returns:
            PathView in source -> target order, or None when either endpoint
            is missing or the target is not reachable within ``max_depth``
            hops. ``source_id == target_id`` yields a single-node path.
        """
        _require_scope(scope)
        opts = resolve_options(
            PathOptions, None, {"max_depth": max_depth, "relation_types": relation_types}
        )
        depth_bound = (
            opts.max_depth if opts.max_depth is not None
            else self._settings.path_max_depth
        )
        allowed_relations = type_filter(opts.relation_types)
        token = self._token(cancellation)

        with self._operation("find_path", scope):
            token.raise_if_cancelled("find_path")
            resolver = _EntityResolver(self._entities, scope)

            source = await resolver.resolve(source_id)
            if source is None:
                return None
            if source_id == target_id:
                return PathView(nodes=[source])
            if await resolver.resolve(target_id) is None:
                return None

            # node id -> (predecessor id, relation that discovered it)
            parents: dict[str, tuple[str, Relation]] = {}
            visited: set[str] = {source_id}
            frontier: list[str] = [source_id]
            depth = 0

            while frontier and depth < depth_bound:
                token.raise_if_cancelled("find_path")
                fetched = await self._fetch_layer(scope, frontier)
                next_frontier: list[str] = []

                for node_id, relations in zip(frontier, fetched):
                    for rel in relations:
                        if allowed_relations is not None and rel.type not in allowed_relations:
                            continue
                        other_id = rel.other_end(node_id)
                        if other_id in visited:
                            continue
                        if await resolver.resolve(other_id) is None:
                            continue

                        visited.add(other_id)
                        parents[other_id] = (node_id, rel)
                        if other_id == target_id:
                            path = _reconstruct_path(source_id, target_id, parents, resolver)
                            logger.info(
                                "Path %s -> %s: %d hops", source_id, target_id, path.length
                            )
                            return path
                        next_frontier.append(other_id)

                frontier = next_frontier
                depth += 1

            logger.info(
                "No path %s -> %s within %d hops", source_id, target_id, depth_bound
            )
            return None

    async def get_neighbors(
        self,
        scope: str,
        entity_id: str,
        options: NeighborOptions | None = None,
        *,
        direction: str | None = None,
        relation_types: list[str] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> list[Neighbor]:
        """List one (relation, other endpoint) pair per matching relation.

        ``direction="out"`` keeps relations where entity_id is the source,
        ``"in"`` where it is the target. Pairs keep store order and are not
        deduplicated by neighbor. Self-loops and relations whose other
        endpoint does not resolve are dropped.
        """
        _require_scope(scope)
        opts = resolve_options(
            NeighborOptions,
            options,
            {"direction": direction, "relation_types": relation_types},
        )
        allowed_relations = type_filter(opts.relation_types)
        token = self._token(cancellation)

        with self._operation("get_neighbors", scope):
            token.raise_if_cancelled("get_neighbors")
            relations = _owned(
                scope,
                await self._relations.find_by_entity(
                    scope, entity_id, limit=self._settings.relation_fetch_limit
                ),
            )
            token.raise_if_cancelled("get_neighbors")

            resolver = _EntityResolver(self._entities, scope)
            neighbors: list[Neighbor] = []
            for rel in relations:
                if not _matches_direction(rel, entity_id, opts.direction):
                    continue
                if allowed_relations is not None and rel.type not in allowed_relations:
                    continue
                other_id = rel.other_end(entity_id)
                if other_id == entity_id:
                    continue
                other = await resolver.resolve(other_id)
                if other is None:
                    continue
                neighbors.append(Neighbor(relation=rel, entity=other))

            logger.info(
                "Neighbors of %s (%s): %d", entity_id, opts.direction, len(neighbors)
            )
            return neighbors

    # --- Internals ---

    def _token(self, cancellation: CancellationToken | None) -> CancellationToken:
        if cancellation is not None:
            return cancellation
        timeout = self._settings.query_timeout_seconds
        if timeout is not None:
            return CancellationToken.with_timeout(timeout)
        return CancellationToken()

    @contextmanager
    def _operation(self, operation: str, scope: str) -> Iterator[None]:
        """Bind logging context; log store failures before they propagate."""
        with query_context(scope, operation):
            try:
                yield
            except GraphQueryError as e:
                logger.info("%s stopped: %s", operation, e)
                raise
            except Exception as e:
                logger.warning(
                    "%s aborted by store failure (%s, %s): %s",
                    operation, self._entities.provider_name,
                    self._relations.provider_name, e,
                )
                raise

    async def _fetch_layer(self, scope: str, layer: list[str]) -> list[list[Relation]]:
        """Fetch relations for every node of one BFS layer, preserving layer order."""
        limit = self._settings.relation_fetch_limit
        if self._settings.parallel_layer_fetch and len(layer) > 1:
            tasks = [
                asyncio.create_task(
                    self._relations.find_by_entity(scope, node_id, limit=limit)
                )
                for node_id in layer
            ]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                # No store call may outlive a failed or cancelled layer
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            results = [
                await self._relations.find_by_entity(scope, node_id, limit=limit)
                for node_id in layer
            ]
        return [_owned(scope, relations) for relations in results]


class _EntityResolver:
    """Per-call memo of entity lookups, including misses."""

    def __init__(self, store: BaseEntityStore, scope: str) -> None:
        self._store = store
        self._scope = scope
        self._cache: dict[str, Entity | None] = {}

    async def resolve(self, entity_id: str) -> Entity | None:
        if entity_id not in self._cache:
            entity = await self._store.find_by_id(self._scope, entity_id)
            if entity is not None and entity.owner_scope != self._scope:
                logger.warning("Store returned out-of-scope entity %s", entity_id)
                entity = None
            self._cache[entity_id] = entity
        return self._cache[entity_id]

    def cached(self, entity_id: str) -> Entity:
        entity = self._cache.get(entity_id)
        if entity is None:
            raise KeyError(entity_id)
        return entity


def _require_scope(scope: str) -> None:
    if not scope:
        raise InvalidQueryError("scope must be a non-empty string")


def _owned(scope: str, records: Iterable[RecordT]) -> list[RecordT]:
    """Drop records belonging to another scope."""
    kept = []
    for record in records:
        if record.owner_scope == scope:
            kept.append(record)
        else:
            logger.warning(
                "Store returned out-of-scope %s %s", type(record).__name__, record.id
            )
    return kept


def _dedupe(records: Iterable[RecordT]) -> list[RecordT]:
    """Keep the first record for each id, in order."""
    seen: set[str] = set()
    unique = []
    for record in records:
        if record.id not in seen:
            seen.add(record.id)
            unique.append(record)
    return unique


def _matches_direction(relation: Relation, entity_id: str, direction: str) -> bool:
    if direction == "out":
        return relation.source_id == entity_id
    if direction == "in":
        return relation.target_id == entity_id
    return relation.touches(entity_id)


def _reconstruct_path(
    source_id: str,
    target_id: str,
    parents: dict[str, tuple[str, Relation]],
    resolver: _EntityResolver,
) -> PathView:
    """Walk back-pointers from target to source and reverse."""
    nodes = [resolver.cached(target_id)]
    edges: list[Relation] = []
    current = target_id
    while current != source_id:
        previous, relation = parents[current]
        edges.append(relation)
        nodes.append(resolver.cached(previous))
        current = previous
    nodes.reverse()
    edges.reverse()
    return PathView(nodes=nodes, edges=edges)
