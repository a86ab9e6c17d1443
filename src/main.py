# src/main.py — v1
"""CLI entry point: run graph queries against a JSON snapshot.

Usage:
    kgtraverse --snapshot graph.json full-graph --scope S [--limit N]
    kgtraverse --snapshot graph.json traverse --scope S START [--max-depth N]
    kgtraverse --snapshot graph.json path --scope S SOURCE TARGET [--max-depth N]
    kgtraverse --snapshot graph.json neighbors --scope S ENTITY [--direction out]

Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

from kgtraverse.logging.context import set_request_context
from kgtraverse.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)
    set_request_context(uuid.uuid4().hex[:12])

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="kgtraverse",
        description=f"kgtraverse v{__version__}: knowledge graph traversal queries",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--snapshot", type=Path, default=None,
        help="JSON snapshot to load (default: KGTRAVERSE_SNAPSHOT_PATH)",
    )
    parser.add_argument(
        "--backend", choices=["memory", "networkx"], default=None,
        help="Store backend (default: KGTRAVERSE_STORE_BACKEND)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- full-graph ---
    p_full = subparsers.add_parser("full-graph", help="List a scope's entities and relations")
    _add_scope(p_full)
    p_full.add_argument("--limit", type=int, default=None, help="Max entities and max relations")
    p_full.set_defaults(func=_cmd_full_graph)

    # --- traverse ---
    p_trav = subparsers.add_parser("traverse", help="Breadth-first traversal from an entity")
    _add_scope(p_trav)
    p_trav.add_argument("start", help="Start entity id")
    p_trav.add_argument("--max-depth", type=int, default=None)
    p_trav.add_argument(
        "--entity-type", dest="entity_types", action="append", default=None,
        help="Allowed entity type (repeatable)",
    )
    p_trav.add_argument(
        "--relation-type", dest="relation_types", action="append", default=None,
        help="Allowed relation type (repeatable)",
    )
    p_trav.add_argument("--limit", type=int, default=None, help="Max nodes returned")
    p_trav.set_defaults(func=_cmd_traverse)

    # --- path ---
    p_path = subparsers.add_parser("path", help="Shortest path between two entities")
    _add_scope(p_path)
    p_path.add_argument("source", help="Source entity id")
    p_path.add_argument("target", help="Target entity id")
    p_path.add_argument("--max-depth", type=int, default=None)
    p_path.set_defaults(func=_cmd_path)

    # --- neighbors ---
    p_nb = subparsers.add_parser("neighbors", help="Direct neighbors of an entity")
    _add_scope(p_nb)
    p_nb.add_argument("entity", help="Entity id")
    p_nb.add_argument("--direction", choices=["in", "out", "both"], default="both")
    p_nb.add_argument(
        "--relation-type", dest="relation_types", action="append", default=None,
        help="Allowed relation type (repeatable)",
    )
    p_nb.set_defaults(func=_cmd_neighbors)

    return parser


def _add_scope(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--scope", required=True, help="Tenant/owner scope")


def _build_engine(args: argparse.Namespace):
    """Create settings, stores and engine from CLI arguments."""
    from kgtraverse.config.settings import Settings
    from kgtraverse.query.engine import GraphQueryEngine
    from kgtraverse.store.store_factory import create_stores

    overrides: dict[str, Any] = {}
    if args.snapshot is not None:
        overrides["snapshot_path"] = args.snapshot
    if args.backend is not None:
        overrides["store_backend"] = args.backend
    settings = Settings(**overrides)
    _setup_logging(args.verbose, settings)

    if settings.snapshot_path is None:
        logger.warning("No snapshot configured; querying empty stores")

    entity_store, relation_store = create_stores(settings)
    return GraphQueryEngine(entity_store, relation_store, settings=settings)


async def _cmd_full_graph(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    view = await engine.get_full_graph(args.scope, limit=args.limit)
    _emit(view.model_dump(mode="json"))
    return 0


async def _cmd_traverse(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    view = await engine.traverse(
        args.scope,
        args.start,
        max_depth=args.max_depth,
        entity_types=args.entity_types,
        relation_types=args.relation_types,
        limit=args.limit,
    )
    _emit(view.model_dump(mode="json"))
    return 0


async def _cmd_path(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    path = await engine.find_path(args.scope, args.source, args.target, args.max_depth)
    _emit(None if path is None else path.model_dump(mode="json"))
    return 0


async def _cmd_neighbors(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    neighbors = await engine.get_neighbors(
        args.scope,
        args.entity,
        direction=args.direction,
        relation_types=args.relation_types,
    )
    _emit([n.model_dump(mode="json") for n in neighbors])
    return 0


def _emit(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _setup_logging(verbose: bool, settings: Any | None = None) -> None:
    """Configure logging for CLI usage.

    Before settings are loaded a plain stderr text logger is used; once
    loaded, LOG_* settings apply unless --verbose forces DEBUG text output.
    """
    from kgtraverse.logging.logger import setup_logging

    if settings is None or verbose:
        setup_logging(level="DEBUG" if verbose else "INFO", log_format="text")
    else:
        setup_logging(
            level=settings.log_level,
            log_format=settings.log_format,
            log_file=str(settings.log_file) if settings.log_file else None,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )


if __name__ == "__main__":
    sys.exit(main())
