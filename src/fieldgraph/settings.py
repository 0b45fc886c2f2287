from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "FIELDGRAPH_"
DEFAULT_CONFIG_NAME = "fieldgraph.toml"


class DatabaseSettings(BaseModel):
    path: Path | None = None
    users_table: str = "users"
    login_column: str = "username"

    model_config = ConfigDict(extra="ignore")

    @field_validator("path", mode="before")
    @classmethod
    def empty_path_is_none(cls, value: Any) -> Any:
        return None if value in ("", None) else value


class DocumentSettings(BaseModel):
    path: Path | None = None
    collection: str = "profiles"

    model_config = ConfigDict(extra="ignore")

    @field_validator("path", mode="before")
    @classmethod
    def empty_path_is_none(cls, value: Any) -> Any:
        return None if value in ("", None) else value


class ResolutionSettings(BaseModel):
    missing_user: Literal["zero", "null"] = "zero"

    model_config = ConfigDict(extra="ignore")


class LoggingSettings(BaseModel):
    level: str = "WARNING"
    jsonl: bool = False

    model_config = ConfigDict(extra="ignore")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class FieldgraphSettings(BaseModel):
    database: DatabaseSettings = DatabaseSettings()
    documents: DocumentSettings = DocumentSettings()
    resolution: ResolutionSettings = ResolutionSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = ConfigDict(extra="ignore")


def resolve_config_path(config: Path | None) -> Path | None:
    if config is not None:
        return config if config.exists() else None
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.exists() else None


def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)  # type: ignore[index]
        else:
            target[key] = value
    return target


def _load_toml(path: Path | None) -> Dict[str, Any]:
    if path is None or not path.exists():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def _extract_prefixed(source: Dict[str, str], *, prefix: str = ENV_PREFIX, delimiter: str = "__") -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in source.items():
        if not key.startswith(prefix):
            continue
        path = key.removeprefix(prefix).split(delimiter)
        target = data
        for part in path[:-1]:
            target = target.setdefault(part.lower(), {})
        target[path[-1].lower()] = value
    return data


def load_settings(
    *,
    config_path: Path | None = None,
    overrides: Dict[str, Any] | None = None,
    environ: Dict[str, str] | None = None,
) -> FieldgraphSettings:
    """Merge TOML config, ``FIELDGRAPH_*`` environment variables and overrides."""

    resolved = resolve_config_path(config_path)
    if config_path is not None and resolved is None:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    merged: Dict[str, Any] = {}
    _deep_update(merged, _load_toml(resolved))
    _deep_update(merged, _extract_prefixed(dict(os.environ if environ is None else environ)))
    if overrides:
        _deep_update(merged, overrides)

    return FieldgraphSettings(**merged)


__all__ = [
    "FieldgraphSettings",
    "DatabaseSettings",
    "DocumentSettings",
    "ResolutionSettings",
    "LoggingSettings",
    "resolve_config_path",
    "load_settings",
]
