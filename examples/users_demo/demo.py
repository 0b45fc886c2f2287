# examples/users_demo/demo.py
from __future__ import annotations

import json
import sqlite3

from fieldgraph import execute
from fieldgraph.logging_config import configure_logging
from fieldgraph.users import (
    DocumentPermissionStore,
    JsonDocumentDatabase,
    SqlUserStore,
    build_user_schema,
    make_context,
)

USERS = [
    ("alice", "true", "true"),
    ("bob", "false", "true"),
    ("carol", "false", "false"),
]

DOCUMENTS = {"profiles": [{"permissions": ["read", "write"]}]}

REQUESTS = [
    '{ hello }',
    '{ user(login: "alice") { login admin permissions } }',
    '{ user(login: "ghost") { login } }',
    '{ user { login } nope }',
    '{ user(login: "bob") { login',
]


def _seed(conn: sqlite3.Connection) -> None:
    conn.execute('CREATE TABLE "users" ("username" TEXT PRIMARY KEY, "admin" TEXT, "active" TEXT)')
    conn.executemany('INSERT INTO "users" VALUES (?, ?, ?)', USERS)
    conn.commit()


def main() -> None:
    configure_logging(level="DEBUG")
    schema = build_user_schema()

    conn = sqlite3.connect(":memory:")
    try:
        _seed(conn)
        context = make_context(SqlUserStore(conn), DocumentPermissionStore(JsonDocumentDatabase(DOCUMENTS)))
        for request in REQUESTS:
            result = execute(schema, request, context=context)
            print(request)
            print("  ->", json.dumps(result.to_dict(), ensure_ascii=False))
    finally:
        conn.close()


if __name__ == "__main__":
    main()
