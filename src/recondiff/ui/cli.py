# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from recondiff.app import (
    build_context,
    load_json,
    match_entity_lists,
    merge_field_proposals,
    reconcile_document_tree,
    reconcile_entity,
    reconcile_query_results,
)
from recondiff.common.logging import configure_logging
from recondiff.config import ConfigurationError
from recondiff.domain.diffing import FieldConflictError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile edited records with their stored state")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output (match summaries, dropped nodes)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_schema_option(command: argparse.ArgumentParser) -> None:
        command.add_argument(
            "--schema",
            type=Path,
            help="Schema JSON document (defaults to $RECONDIFF_SCHEMA_PATH)",
        )

    match = subparsers.add_parser("match", help="Match a new entity list against an old one")
    match.add_argument("new", type=Path, help="JSON array of new entities")
    match.add_argument("old", type=Path, help="JSON array of stored entities")
    add_schema_option(match)

    entity = subparsers.add_parser("entity", help="Diff an edited entity against its stored state")
    entity.add_argument("new", type=Path, help="JSON object of the edited entity")
    entity.add_argument("old", type=Path, help="JSON object of the stored entity (with uid)")
    add_schema_option(entity)

    query = subparsers.add_parser("query", help="Diff edited query results")
    query.add_argument("new", type=Path, help="JSON array of edited results")
    query.add_argument("old", type=Path, help="JSON array of stored results")
    query.add_argument(
        "--query",
        type=str,
        help="Filter string shared by every result, e.g. 'type=Task AND status=pending'",
    )
    add_schema_option(query)

    tree = subparsers.add_parser("tree", help="Diff two document trees")
    tree.add_argument("new", type=Path, help="JSON object of the edited document root")
    tree.add_argument("old", type=Path, help="JSON object of the stored document root")

    merge = subparsers.add_parser("merge", help="Merge field proposals against a base snapshot")
    merge.add_argument("base", type=Path, help="JSON object of the base snapshot")
    merge.add_argument(
        "proposals",
        type=Path,
        help='JSON array of {"path": ..., "value": ..., "source": ...} proposals',
    )

    return parser.parse_args(list(argv))


def _require_list(value: Any, path: Path) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{path} must contain a JSON array")  # noqa: TRY004
    return value


def _require_object(value: Any, path: Path) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{path} must contain a JSON object")  # noqa: TRY004
    return value


def _prepare(args: argparse.Namespace) -> Callable[[], object]:
    """Load every input up front so that bad files fail before any work is done."""

    if args.command == "tree":
        new_root = _require_object(load_json(args.new), args.new)
        old_root = _require_object(load_json(args.old), args.old)
        return lambda: reconcile_document_tree(new_root, old_root)

    if args.command == "merge":
        base = _require_object(load_json(args.base), args.base)
        proposals = _require_list(load_json(args.proposals), args.proposals)
        return lambda: merge_field_proposals(base, proposals)

    context = build_context(schema_path=args.schema)
    if args.command == "entity":
        new_entity = _require_object(load_json(args.new), args.new)
        old_entity = _require_object(load_json(args.old), args.old)
        return lambda: reconcile_entity(context, new_entity, old_entity)

    new_entities = _require_list(load_json(args.new), args.new)
    old_entities = _require_list(load_json(args.old), args.old)
    if args.command == "match":
        return lambda: asdict(match_entity_lists(context, new_entities, old_entities))
    if args.command == "query":
        return lambda: asdict(
            reconcile_query_results(context, new_entities, old_entities, args.query)
        )
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        operation = _prepare(parsed_args)
    except (ValueError, ConfigurationError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = operation()
    except FieldConflictError as exc:
        conflict = exc.conflict
        log.error(  # noqa: TRY400
            "%s: %s",
            exc,
            [proposed.value for proposed in conflict.values],
        )
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
