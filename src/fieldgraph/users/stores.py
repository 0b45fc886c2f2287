"""Data collaborators behind the user schema: a relational table and a document collection."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Union, runtime_checkable

from .models import UserProfile, UserRecord

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


@runtime_checkable
class UserStore(Protocol):
    def find_user(self, login: str) -> Optional[UserRecord]: ...


@runtime_checkable
class PermissionStore(Protocol):
    def permissions(self) -> List[str]: ...


class SqlUserStore:
    """Users table reader over an existing DB-API 2.0 connection.

    Notes
    -----
    Queries use ``paramstyle="qmark"`` (``?`` placeholders), as SQLite does.
    The connection is owned by the caller.
    """

    def __init__(self, connection, table: str = "users", login_column: str = "username"):
        for ident in (table, login_column):
            if not _IDENT_RE.match(ident):
                raise ValueError(f"Invalid SQL identifier: {ident!r}")
        self.connection = connection
        self.table = table
        self.login_column = login_column

    def _quote_ident(self, name: str) -> str:
        return f'"{name}"'

    def _select_sql(self) -> str:
        login = self._quote_ident(self.login_column)
        return (
            f"SELECT {login}, {self._quote_ident('admin')}, {self._quote_ident('active')} "
            f"FROM {self._quote_ident(self.table)} WHERE {login} = ?"
        )

    def find_user(self, login: str) -> Optional[UserRecord]:
        cur = self.connection.cursor()
        try:
            cur.execute(self._select_sql(), (login,))
            row = cur.fetchone()
        finally:
            cur.close()
        if row is None:
            logger.debug("No user row for login=%r in %s", login, self.table)
            return None
        return UserRecord.from_row(row)


class DocumentPermissionStore:
    """Reads the permissions list from the first document of a collection.

    ``database`` is anything indexable by collection name whose collections
    expose ``find_one(filter)``, e.g. a pymongo ``Database`` or
    :class:`JsonDocumentDatabase`.
    """

    def __init__(self, database, collection: str = "profiles"):
        self.database = database
        self.collection = collection

    def permissions(self) -> List[str]:
        doc = self.database[self.collection].find_one({})
        if doc is None:
            logger.debug("Collection %s has no profile document", self.collection)
            return []
        profile = UserProfile.model_validate(doc)
        return list(profile.permissions)


class JsonDocumentCollection:
    def __init__(self, name: str, documents: List[Dict[str, Any]]):
        self.name = name
        self._documents = documents

    @staticmethod
    def _matches(doc: Mapping[str, Any], flt: Mapping[str, Any]) -> bool:
        return all(key in doc and doc[key] == value for key, value in flt.items())

    def find(self, flt: Optional[Mapping[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        flt = flt or {}
        for doc in self._documents:
            if self._matches(doc, flt):
                yield dict(doc)

    def find_one(self, flt: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        return next(self.find(flt), None)

    def __len__(self) -> int:
        return len(self._documents)


class JsonDocumentDatabase:
    """Read-only document database loaded from ``{"collection": [doc, ...]}``.

    Unknown collections behave as empty ones.
    """

    def __init__(self, source: Union[str, Path, Mapping[str, Any]]):
        if isinstance(source, Mapping):
            data = dict(source)
            self.path: Optional[Path] = None
        else:
            self.path = Path(source)
            data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Document database must be a JSON object of collections")

        self._collections: Dict[str, JsonDocumentCollection] = {}
        for name, docs in data.items():
            if not isinstance(docs, list) or not all(isinstance(d, dict) for d in docs):
                raise ValueError(f"Collection {name!r} must be a list of objects")
            self._collections[name] = JsonDocumentCollection(name, docs)

    def __getitem__(self, name: str) -> JsonDocumentCollection:
        return self._collections.get(name) or JsonDocumentCollection(name, [])

    def collection_names(self) -> List[str]:
        return sorted(self._collections)


__all__ = [
    "UserStore",
    "PermissionStore",
    "SqlUserStore",
    "DocumentPermissionStore",
    "JsonDocumentCollection",
    "JsonDocumentDatabase",
]
