# src/store/snapshot_loader.py — v1
"""Load a JSON graph snapshot into a store pair.

Format::

    {"entities": [{"id": ..., "owner_scope": ..., ...}],
     "relations": [{"id": ..., "source_id": ..., "target_id": ..., ...}]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kgtraverse.core.models import Entity, Relation

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """Raised when a snapshot document is malformed."""


def parse_snapshot(data: Any) -> tuple[list[Entity], list[Relation]]:
    """Validate a decoded snapshot document into model lists."""
    if not isinstance(data, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")

    raw_entities = data.get("entities", [])
    raw_relations = data.get("relations", [])
    if not isinstance(raw_entities, list) or not isinstance(raw_relations, list):
        raise SnapshotFormatError("'entities' and 'relations' must be lists")

    try:
        entities = [Entity.model_validate(item) for item in raw_entities]
        relations = [Relation.model_validate(item) for item in raw_relations]
    except ValidationError as e:
        raise SnapshotFormatError(f"Invalid snapshot record: {e}") from e

    return entities, relations


def load_snapshot(path: Path | str) -> tuple[list[Entity], list[Relation]]:
    """Read and validate a snapshot file.

    Raises:
        FileNotFoundError: If the file does not exist.
        SnapshotFormatError: If the content is not a valid snapshot.
    """
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"{path}: not valid JSON ({e})") from e

    entities, relations = parse_snapshot(data)
    logger.info(
        "Loaded snapshot %s: %d entities, %d relations",
        path, len(entities), len(relations),
    )
    return entities, relations
