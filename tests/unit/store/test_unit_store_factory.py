# tests/unit/store/test_unit_store_factory.py — v1
"""Tests for store/store_factory.py — backend selection and snapshot loading."""

from __future__ import annotations

import json

import pytest

from kgtraverse.config.settings import Settings
from kgtraverse.store.memory_store import InMemoryEntityStore, InMemoryRelationStore
from kgtraverse.store.networkx_store import NetworkXGraphStore
from kgtraverse.store.store_factory import UnsupportedStoreError, create_stores

SCOPE = "tenant-1"


class TestCreateStores:
    def test_memory_backend(self, settings):
        entity_store, relation_store = create_stores(settings)
        assert isinstance(entity_store, InMemoryEntityStore)
        assert isinstance(relation_store, InMemoryRelationStore)

    def test_networkx_backend_shares_one_store(self):
        s = Settings(_env_file=None, store_backend="networkx")
        entity_store, relation_store = create_stores(s)
        assert isinstance(entity_store, NetworkXGraphStore)
        assert entity_store is relation_store

    def test_unsupported_backend(self):
        s = Settings.model_construct(store_backend="neo4j", snapshot_path=None)
        with pytest.raises(UnsupportedStoreError, match="neo4j"):
            create_stores(s)

    def test_unsupported_is_value_error(self):
        assert issubclass(UnsupportedStoreError, ValueError)

    @pytest.mark.asyncio
    async def test_given_records_loaded(self, settings, e1, r1):
        entity_store, relation_store = create_stores(settings, [e1], [r1])
        assert await entity_store.find_by_id(SCOPE, "entity-1") == e1
        assert await relation_store.find_by_user(SCOPE, limit=10) == [r1]


class TestSnapshotLoading:
    @pytest.fixture
    def snapshot_file(self, tmp_path, e1, e2, r1):
        path = tmp_path / "graph.json"
        path.write_text(
            json.dumps({
                "entities": [e1.model_dump(mode="json"), e2.model_dump(mode="json")],
                "relations": [r1.model_dump(mode="json")],
            }),
            encoding="utf-8",
        )
        return path

    @pytest.mark.asyncio
    async def test_snapshot_used_when_no_records_given(self, snapshot_file, e1):
        s = Settings(_env_file=None, snapshot_path=snapshot_file)
        entity_store, _ = create_stores(s)
        assert await entity_store.find_by_id(SCOPE, "entity-1") == e1

    @pytest.mark.asyncio
    async def test_explicit_records_win_over_snapshot(self, snapshot_file, e3):
        s = Settings(_env_file=None, snapshot_path=snapshot_file)
        entity_store, _ = create_stores(s, entities=[e3])
        assert await entity_store.find_by_id(SCOPE, "entity-1") is None
        assert await entity_store.find_by_id(SCOPE, "entity-3") == e3

    @pytest.mark.asyncio
    async def test_snapshot_into_networkx(self, snapshot_file):
        s = Settings(_env_file=None, snapshot_path=snapshot_file, store_backend="networkx")
        store, _ = create_stores(s)
        assert store.graph_for(SCOPE).number_of_edges() == 1
