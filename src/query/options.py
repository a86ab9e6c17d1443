# src/query/options.py — v1
"""Validated option models for the query engine.

A field left at None falls back to the engine's configured default.
"""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kgtraverse.query.errors import InvalidQueryError

Direction = Literal["in", "out", "both"]


class _QueryOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class FullGraphOptions(_QueryOptions):
    """Bounds for a scoped snapshot; applied to entities and relations separately."""

    limit: int | None = Field(default=None, gt=0)


class TraversalOptions(_QueryOptions):
    """Options for a bounded breadth-first traversal.

    entity_types prunes the search: a discovered entity of another type is
    neither returned nor expanded. The start entity is always returned.
    """

    max_depth: int | None = Field(default=None, ge=0)
    entity_types: list[str] | None = None
    relation_types: list[str] | None = None
    limit: int | None = Field(default=None, gt=0)


class PathOptions(_QueryOptions):
    max_depth: int | None = Field(default=None, ge=0)
    relation_types: list[str] | None = None


class NeighborOptions(_QueryOptions):
    direction: Direction = "both"
    relation_types: list[str] | None = None


OptionsT = TypeVar("OptionsT", bound=_QueryOptions)


def resolve_options(
    model: type[OptionsT],
    options: OptionsT | None,
    overrides: dict[str, Any],
) -> OptionsT:
    """Merge an options object with keyword overrides and validate.

    Raises:
        InvalidQueryError: If any value fails validation.
    """
    data: dict[str, Any] = {}
    if options is not None:
        data.update(options.model_dump(exclude_unset=True))
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidQueryError(str(e)) from e


def type_filter(types: list[str] | None) -> frozenset[str] | None:
    """Allow-list as a set; None means no filtering."""
    return None if types is None else frozenset(types)
