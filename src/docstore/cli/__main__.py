"""
Command-line interface for DocStore.

Usage:
    python -m docstore.cli <command> [options]

Available commands:
    ddl      - Print the DDL a collection needs
    ensure   - Create collection tables and indexes
    insert   - Insert a JSON document, printing its identifier
    get      - Query documents, printing one JSON object per line

Connection and index settings come from DOCSTORE_* environment variables
(see docstore.config.settings).
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from docstore.config import get_settings
from docstore.errors import DocStoreError
from docstore.store import Document, DocumentStore
from docstore.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_param(raw: str) -> Dict[str, Any]:
    """
    Parse a ``name=value`` parameter; values that parse as JSON keep their type.

    Examples:
        >>> parse_param("min_age=30")
        {'min_age': 30}
        >>> parse_param("name=Ava")
        {'name': 'Ava'}
    """
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Expected name=value, got '{raw}'")
    name, value = raw.split("=", 1)
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Missing parameter name in '{raw}'")
    try:
        parsed: Any = json.loads(value)
    except ValueError:
        parsed = value
    return {name: parsed}


def _format_document(document: Document) -> str:
    payload: Dict[str, Any] = {"_id": str(document.id)}
    if document.ok:
        payload["document"] = document.body
    else:
        payload["error"] = str(document.error)
    return json.dumps(payload, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docstore.cli",
        description="DocStore CLI - JSON documents in relational tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview the DDL for a collection
  python -m docstore.cli ddl users

  # Create collections up front
  python -m docstore.cli ensure users orders

  # Insert a document
  python -m docstore.cli insert users '{"name": "Ava", "age": 31}'

  # Query with a bound parameter
  python -m docstore.cli get users --where "age > :min_age" --param min_age=30
        """,
    )
    parser.add_argument(
        "--schema", default=None, help="Database schema (overrides DOCSTORE_DATABASE_SCHEMA)"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    ddl_parser = subparsers.add_parser("ddl", help="Print the DDL a collection needs")
    ddl_parser.add_argument("collection")

    ensure_parser = subparsers.add_parser(
        "ensure", help="Create collection tables and indexes"
    )
    ensure_parser.add_argument("collections", nargs="+")

    insert_parser = subparsers.add_parser("insert", help="Insert a JSON document")
    insert_parser.add_argument("collection")
    insert_parser.add_argument("document", help="Document as JSON text")

    get_parser = subparsers.add_parser("get", help="Query documents")
    get_parser.add_argument("collection")
    get_parser.add_argument("--where", default=None, help="Trusted SQL predicate")
    get_parser.add_argument(
        "--suffix", default=None, help="Trusted clause appended to the query"
    )
    get_parser.add_argument(
        "--param",
        action="append",
        type=parse_param,
        default=[],
        help="Bound parameter as name=value (repeatable)",
    )
    get_parser.add_argument(
        "--many", action="store_true", help="Return every match instead of the first"
    )
    return parser


async def _execute(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.schema:
        settings = settings.model_copy(update={"database_schema": args.schema})

    async with DocumentStore.from_settings(settings) as store:
        if args.command == "ddl":
            for statement in store.preview_ddl(args.collection):
                print(statement)
            return 0

        if args.command == "ensure":
            for collection in args.collections:
                created = await store.ensure_collection(collection)
                print(f"{collection}: {'created' if created else 'ready'}")
            return 0

        if args.command == "insert":
            try:
                document = json.loads(args.document)
            except ValueError as e:
                print(f"Invalid JSON document: {e}", file=sys.stderr)
                return 2
            document_id = await store.insert(args.collection, document)
            print(document_id)
            return 0

        if args.command == "get":
            params: Dict[str, Any] = {}
            for item in args.param:
                params.update(item)
            if args.many:
                documents = await store.get_many(
                    args.collection, args.where, args.suffix, params
                )
            else:
                found = await store.get_one(
                    args.collection, args.where, args.suffix, params
                )
                documents = [found] if found is not None else []
            for document in documents:
                print(_format_document(document))
            return 0

    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()
    try:
        return asyncio.run(_execute(args))
    except DocStoreError as e:
        logger.error("cli.command_failed", command=args.command, **e.to_dict())
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        logger.error(
            "cli.invalid_configuration",
            command=args.command,
            error_count=e.error_count(),
        )
        # Messages only; the input values may hold credentials
        messages = "; ".join(error["msg"] for error in e.errors())
        print(f"Configuration error: {messages}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
