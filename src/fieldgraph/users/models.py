from __future__ import annotations

from typing import Any, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class UserRecord(BaseModel):
    """One row of the users table.

    Column values are kept as text, the way the table is scanned; a record
    with all fields empty stands for "no such user".
    """

    login: str = ""
    admin: str = ""
    active: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("login", "admin", "active", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "UserRecord":
        if len(row) != 3:
            raise ValueError(f"Expected 3 columns (login, admin, active), got {len(row)}")
        login, admin, active = row
        return cls(login=login, admin=admin, active=active)

    @classmethod
    def empty(cls) -> "UserRecord":
        return cls()


class UserProfile(BaseModel):
    permissions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


__all__ = ["UserRecord", "UserProfile"]
