# tests/unit/store/test_unit_snapshot_loader.py — v1
"""Tests for store/snapshot_loader.py — JSON snapshot parsing."""

from __future__ import annotations

import json

import pytest

from kgtraverse.store.snapshot_loader import (
    SnapshotFormatError,
    load_snapshot,
    parse_snapshot,
)

_DOC = {
    "entities": [
        {"id": "e1", "owner_scope": "tenant-1", "type": "Person", "name": "John",
         "properties": {"age": 30}, "created_at": "2026-01-15T09:30:00Z"},
        {"id": "e2", "owner_scope": "tenant-1", "type": "Company", "name": "Acme"},
    ],
    "relations": [
        {"id": "r1", "owner_scope": "tenant-1", "source_id": "e1",
         "target_id": "e2", "type": "WORKS_AT", "confidence": 0.9},
    ],
}


class TestParseSnapshot:
    def test_valid(self):
        entities, relations = parse_snapshot(_DOC)
        assert [e.id for e in entities] == ["e1", "e2"]
        assert entities[0].properties == {"age": 30}
        assert entities[0].created_at is not None
        assert relations[0].type == "WORKS_AT"

    def test_missing_sections_default_empty(self):
        assert parse_snapshot({}) == ([], [])

    def test_not_an_object(self):
        with pytest.raises(SnapshotFormatError, match="JSON object"):
            parse_snapshot([1, 2])

    def test_sections_must_be_lists(self):
        with pytest.raises(SnapshotFormatError, match="must be lists"):
            parse_snapshot({"entities": {"e1": {}}})

    def test_invalid_record(self):
        with pytest.raises(SnapshotFormatError, match="Invalid snapshot record"):
            parse_snapshot({"relations": [{"id": "r1", "owner_scope": "t"}]})

    def test_is_value_error(self):
        assert issubclass(SnapshotFormatError, ValueError)


class TestLoadSnapshot:
    def test_load_file(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(_DOC), encoding="utf-8")
        entities, relations = load_snapshot(path)
        assert len(entities) == 2
        assert len(relations) == 1

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(_DOC), encoding="utf-8")
        entities, _ = load_snapshot(str(path))
        assert len(entities) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotFormatError, match="not valid JSON"):
            load_snapshot(path)
