from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..execution.context import ExecutionContext, ResolveContext
from ..schema import Argument, Field, ListOf, NonNull, Schema, SchemaRegistry, String
from .models import UserRecord
from .stores import PermissionStore, UserStore

logger = logging.getLogger(__name__)

USERS_SERVICE = "users"
PERMISSIONS_SERVICE = "permissions"

MISSING_USER_MODES = ("zero", "null")


class UserResolver:
    """Fetches a user row by login through the ``users`` service."""

    def __init__(self, missing_user: str = "zero"):
        if missing_user not in MISSING_USER_MODES:
            raise ValueError(f"missing_user must be one of {MISSING_USER_MODES}, got {missing_user!r}")
        self.missing_user = missing_user

    def resolve(self, context: ResolveContext, arguments: dict) -> Optional[UserRecord]:
        store: UserStore = context.service(USERS_SERVICE)
        record = store.find_user(arguments["login"])
        if record is None and self.missing_user == "zero":
            return UserRecord.empty()
        return record


class PermissionsResolver:
    def resolve(self, context: ResolveContext, arguments: dict) -> List[str]:
        store: PermissionStore = context.service(PERMISSIONS_SERVICE)
        return store.permissions()


def _hello(context: ResolveContext, **arguments: Any) -> str:
    logger.debug("hello resolved with arguments %s", arguments)
    return "world"


def build_user_schema(missing_user: str = "zero") -> Schema:
    """Build the ``RootQuery { hello, user(login:) }`` schema.

    ``missing_user`` selects what ``user`` returns when no row matches:
    ``"zero"`` gives a record of empty strings, ``"null"`` gives null.
    """

    registry = SchemaRegistry()
    user_type = registry.define_type(
        "User",
        [
            Field("login", String),
            Field("admin", String),
            Field("active", String),
            Field("permissions", ListOf(String), resolver=PermissionsResolver()),
        ],
    )
    return registry.define_root_query(
        [
            Field("hello", String, resolver=_hello),
            Field(
                "user",
                user_type,
                args=(Argument("login", NonNull(String)),),
                resolver=UserResolver(missing_user),
            ),
        ],
        name="RootQuery",
    )


def make_context(user_store: UserStore, permission_store: PermissionStore) -> ExecutionContext:
    return ExecutionContext(services={USERS_SERVICE: user_store, PERMISSIONS_SERVICE: permission_store})


__all__ = [
    "USERS_SERVICE",
    "PERMISSIONS_SERVICE",
    "MISSING_USER_MODES",
    "UserResolver",
    "PermissionsResolver",
    "build_user_schema",
    "make_context",
]
