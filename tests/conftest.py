from __future__ import annotations

import sqlite3
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fieldgraph.users import (  # noqa: E402
    DocumentPermissionStore,
    JsonDocumentDatabase,
    SqlUserStore,
    make_context,
)

USER_ROWS = [
    ("alice", "true", "true"),
    ("bob", "false", "true"),
]


def create_users_table(conn: sqlite3.Connection, rows=USER_ROWS) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE "users" (
            "username" TEXT PRIMARY KEY,
            "admin" TEXT,
            "active" TEXT
        )
        """
    )
    cur.executemany('INSERT INTO "users" (username, admin, active) VALUES (?, ?, ?)', rows)
    conn.commit()


@pytest.fixture
def users_conn():
    conn = sqlite3.connect(":memory:")
    create_users_table(conn)
    yield conn
    conn.close()


@pytest.fixture
def documents():
    return JsonDocumentDatabase({"profiles": [{"permissions": ["read", "write"]}]})


@pytest.fixture
def user_context(users_conn, documents):
    return make_context(SqlUserStore(users_conn), DocumentPermissionStore(documents))
