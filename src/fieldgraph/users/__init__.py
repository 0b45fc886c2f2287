"""Example application: users table plus document-store permissions."""

from .models import UserProfile, UserRecord
from .stores import (
    DocumentPermissionStore,
    JsonDocumentCollection,
    JsonDocumentDatabase,
    PermissionStore,
    SqlUserStore,
    UserStore,
)
from .schema import (
    PERMISSIONS_SERVICE,
    USERS_SERVICE,
    PermissionsResolver,
    UserResolver,
    build_user_schema,
    make_context,
)

__all__ = [
    "UserRecord",
    "UserProfile",
    "UserStore",
    "PermissionStore",
    "SqlUserStore",
    "DocumentPermissionStore",
    "JsonDocumentCollection",
    "JsonDocumentDatabase",
    "USERS_SERVICE",
    "PERMISSIONS_SERVICE",
    "UserResolver",
    "PermissionsResolver",
    "build_user_schema",
    "make_context",
]
