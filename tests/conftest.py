# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides sample entities/relations, settings without .env lookup, engines
over either store backend, and mock stores for call inspection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from kgtraverse.config.settings import Settings
from kgtraverse.core.models import Entity, Relation
from kgtraverse.logging.context import clear_context
from kgtraverse.query.engine import GraphQueryEngine
from kgtraverse.store.store_factory import create_stores

SCOPE = "tenant-1"
OTHER_SCOPE = "tenant-2"
_TS = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def entity(entity_id: str, type_: str = "Person", name: str | None = None,
           scope: str = SCOPE, **properties) -> Entity:
    return Entity(
        id=entity_id,
        owner_scope=scope,
        type=type_,
        name=name or entity_id,
        properties=properties,
        created_at=_TS,
        updated_at=_TS,
    )


def relation(relation_id: str, source_id: str, target_id: str,
             type_: str = "RELATED_TO", scope: str = SCOPE,
             confidence: float | None = 0.9) -> Relation:
    return Relation(
        id=relation_id,
        owner_scope=scope,
        source_id=source_id,
        target_id=target_id,
        type=type_,
        confidence=confidence,
        created_at=_TS,
        updated_at=_TS,
    )


# === FIXTURES: Sample data ===


@pytest.fixture
def make_entity() -> Callable[..., Entity]:
    return entity


@pytest.fixture
def make_relation() -> Callable[..., Relation]:
    return relation


@pytest.fixture
def e1() -> Entity:
    return entity("entity-1", "Person", "John", age=30)


@pytest.fixture
def e2() -> Entity:
    return entity("entity-2", "Company", "Acme")


@pytest.fixture
def e3() -> Entity:
    return entity("entity-3", "Person", "Jane")


@pytest.fixture
def r1() -> Relation:
    """entity-1 -> entity-2, WORKS_AT."""
    return relation("relation-1", "entity-1", "entity-2", "WORKS_AT")


@pytest.fixture
def r2() -> Relation:
    """entity-1 -> entity-3, KNOWS."""
    return relation("relation-2", "entity-1", "entity-3", "KNOWS", confidence=0.8)


# === FIXTURES: Settings and engines ===


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture(params=["memory", "networkx"])
def backend(request) -> str:
    return request.param


@pytest.fixture
def make_engine(backend: str) -> Callable[..., GraphQueryEngine]:
    """Build an engine over the parametrized backend holding the given records."""

    def _make(
        entities: Iterable[Entity] = (),
        relations: Iterable[Relation] = (),
        **overrides,
    ) -> GraphQueryEngine:
        s = Settings(_env_file=None, store_backend=backend, **overrides)
        entity_store, relation_store = create_stores(s, list(entities), list(relations))
        return GraphQueryEngine(entity_store, relation_store, settings=s)

    return _make


# === FIXTURES: Mock stores ===


@pytest.fixture
def mock_entity_store() -> AsyncMock:
    """Entity store mock; every lookup misses by default."""
    store = AsyncMock()
    store.find_by_id = AsyncMock(return_value=None)
    store.find_many = AsyncMock(return_value=[])
    store.provider_name = "mock"
    return store


@pytest.fixture
def mock_relation_store() -> AsyncMock:
    """Relation store mock; no relations by default."""
    store = AsyncMock()
    store.find_by_user = AsyncMock(return_value=[])
    store.find_by_entity = AsyncMock(return_value=[])
    store.provider_name = "mock"
    return store


@pytest.fixture
def mock_engine(
    mock_entity_store: AsyncMock, mock_relation_store: AsyncMock, settings: Settings
) -> GraphQueryEngine:
    return GraphQueryEngine(mock_entity_store, mock_relation_store, settings=settings)


# === FIXTURES: Isolation ===


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by setup_logging() and clear log context."""
    yield
    logging.getLogger("kgtraverse").handlers.clear()
    clear_context()
