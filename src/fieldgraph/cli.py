from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from contextlib import closing
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from .execution import execute
from .logging_config import configure_logging
from .settings import FieldgraphSettings, load_settings
from .users import DocumentPermissionStore, JsonDocumentDatabase, SqlUserStore, build_user_schema, make_context

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fieldgraph query runner")
    parser.add_argument("--config", type=Path, default=None, help="Path to fieldgraph.toml")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")
    sub = parser.add_subparsers(dest="command", required=True)

    query = sub.add_parser("query", help="Resolve a request against the users schema")
    query.add_argument("--query", required=True, help="Request string, e.g. '{user(login: \"alice\") {login}}'")
    query.add_argument("--variables", default=None, help="JSON object with variable values")
    query.add_argument("--database", type=Path, default=None, help="SQLite database with the users table")
    query.add_argument("--documents", type=Path, default=None, help="JSON document database with profiles")
    query.add_argument(
        "--missing-user",
        choices=("zero", "null"),
        default=None,
        help="Result for an unknown login: empty record (zero) or null",
    )
    query.add_argument(
        "--fail-on-errors",
        action="store_true",
        help="Exit with status 1 when the result carries errors",
    )
    query.add_argument("--indent", type=int, default=None, help="Indent JSON output")

    sub.add_parser("schema", help="Print the users schema")
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.log_json:
        overrides.setdefault("logging", {})["jsonl"] = True
    if getattr(args, "database", None) is not None:
        overrides.setdefault("database", {})["path"] = args.database
    if getattr(args, "documents", None) is not None:
        overrides.setdefault("documents", {})["path"] = args.documents
    if getattr(args, "missing_user", None):
        overrides.setdefault("resolution", {})["missing_user"] = args.missing_user
    return overrides


def _run_query(args: argparse.Namespace, settings: FieldgraphSettings) -> int:
    variables: Dict[str, Any] = {}
    if args.variables:
        try:
            variables = json.loads(args.variables)
        except json.JSONDecodeError as exc:
            print(f"Invalid --variables JSON: {exc}", file=sys.stderr)
            return 2
        if not isinstance(variables, dict):
            print("--variables must be a JSON object", file=sys.stderr)
            return 2

    if settings.database.path is None:
        print("A users database is required (--database or database.path)", file=sys.stderr)
        return 2
    if not settings.database.path.exists():
        print(f"Database not found: {settings.database.path}", file=sys.stderr)
        return 2

    try:
        documents = (
            JsonDocumentDatabase(settings.documents.path)
            if settings.documents.path is not None
            else JsonDocumentDatabase({})
        )
    except (OSError, ValueError) as exc:
        print(f"Documents error: {exc}", file=sys.stderr)
        return 2
    schema = build_user_schema(missing_user=settings.resolution.missing_user)

    with closing(sqlite3.connect(str(settings.database.path))) as connection:
        context = make_context(
            SqlUserStore(
                connection,
                table=settings.database.users_table,
                login_column=settings.database.login_column,
            ),
            DocumentPermissionStore(documents, collection=settings.documents.collection),
        )
        result = execute(schema, args.query, context=context, variables=variables)

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=args.indent))
    if result.errors.has_errors():
        logger.info("Request finished with %d error(s)", len(result.errors.errors()))
        if args.fail_on_errors:
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = load_settings(config_path=args.config, overrides=_overrides(args))
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=settings.logging.level, jsonl=settings.logging.jsonl)

    if args.command == "query":
        return _run_query(args, settings)
    if args.command == "schema":
        print(build_user_schema(missing_user=settings.resolution.missing_user).describe())
        return 0
    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
