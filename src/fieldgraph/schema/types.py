from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from .resolvers import FunctionResolver, Resolver


class SchemaError(ValueError):
    """Raised when a schema cannot be constructed."""


_UNSET: Any = object()


# -----------------------------------------------------------------------------
# Scalars
# -----------------------------------------------------------------------------
def _serialize_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _serialize_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise TypeError(f"Int cannot represent value {value!r}")


def _serialize_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise TypeError(f"Float cannot represent value {value!r}")


def _serialize_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0")
    raise TypeError(f"Boolean cannot represent value {value!r}")


def _parse_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"String cannot represent non-string value {value!r}")
    return value


def _parse_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Int cannot represent non-integer value {value!r}")
    return value


def _parse_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Float cannot represent non-numeric value {value!r}")
    return float(value)


def _parse_boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Boolean cannot represent non-boolean value {value!r}")
    return value


def _parse_id(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"ID cannot represent value {value!r}")
    return str(value)


@dataclass(frozen=True)
class ScalarType:
    name: str
    serialize: Callable[[Any], Any] = field(compare=False, repr=False)
    parse_value: Callable[[Any], Any] = field(compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


String = ScalarType("String", _serialize_string, _parse_string)
Int = ScalarType("Int", _serialize_int, _parse_int)
Float = ScalarType("Float", _serialize_float, _parse_float)
Boolean = ScalarType("Boolean", _serialize_boolean, _parse_boolean)
ID = ScalarType("ID", _serialize_string, _parse_id)

SCALARS: Mapping[str, ScalarType] = MappingProxyType(
    {s.name: s for s in (String, Int, Float, Boolean, ID)}
)


# -----------------------------------------------------------------------------
# Wrappers and object types
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NonNull:
    of_type: "TypeRef"

    def __post_init__(self) -> None:
        if isinstance(self.of_type, NonNull):
            raise SchemaError("NonNull cannot wrap another NonNull")

    def __str__(self) -> str:
        return f"{_type_label(self.of_type)}!"


@dataclass(frozen=True)
class ListOf:
    of_type: "TypeRef"

    def __str__(self) -> str:
        return f"[{_type_label(self.of_type)}]"


@dataclass(frozen=True)
class Argument:
    name: str
    type: Union[ScalarType, NonNull]
    default: Any = _UNSET
    description: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET

    @property
    def required(self) -> bool:
        return isinstance(self.type, NonNull) and not self.has_default


@dataclass(frozen=True)
class Field:
    """A named, typed member of an :class:`ObjectType`.

    ``resolver`` may be a :class:`Resolver` or a plain callable taking
    ``(context, **arguments)``; without one the engine reads ``name`` from the
    parent value and falls back to ``default``.
    """

    name: str
    type: "TypeRef"
    args: Tuple[Argument, ...] = ()
    resolver: Optional[Resolver] = None
    default: Any = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("Field name must not be empty")
        object.__setattr__(self, "args", tuple(self.args))
        if self.resolver is not None and not hasattr(self.resolver, "resolve"):
            if not callable(self.resolver):
                raise SchemaError(f"Resolver for field {self.name!r} is not callable")
            object.__setattr__(self, "resolver", FunctionResolver(self.resolver))

    def argument(self, name: str) -> Optional[Argument]:
        for arg in self.args:
            if arg.name == name:
                return arg
        return None


@dataclass(frozen=True, eq=False)
class ObjectType:
    name: str
    fields: Mapping[str, Field]
    description: Optional[str] = None

    def field(self, name: str) -> Optional[Field]:
        return self.fields.get(name)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def field_names(self) -> list[str]:
        return list(self.fields)

    def __str__(self) -> str:
        return self.name


TypeRef = Union[ScalarType, ObjectType, NonNull, ListOf, str]


def _type_label(type_: Any) -> str:
    return type_ if isinstance(type_, str) else str(type_)


def unwrap(type_: TypeRef) -> TypeRef:
    """Strip ``NonNull``/``ListOf`` wrappers down to the named type."""

    while isinstance(type_, (NonNull, ListOf)):
        type_ = type_.of_type
    return type_


# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------
class Schema:
    """Read-only schema: a root query type plus every named object type."""

    def __init__(self, query: Optional[ObjectType], types: Optional[Mapping[str, ObjectType]] = None):
        if query is None:
            raise SchemaError("Schema requires a root query type")
        all_types = dict(types or {})
        all_types.setdefault(query.name, query)
        self._query = query
        self._types: Mapping[str, ObjectType] = MappingProxyType(all_types)

    @property
    def query_type(self) -> ObjectType:
        return self._query

    @property
    def types(self) -> Mapping[str, ObjectType]:
        return self._types

    def type(self, name: str) -> Optional[ObjectType]:
        return self._types.get(name)

    def describe(self) -> str:
        """Render the schema as SDL-like text, root query first."""

        ordered = [self._query] + [t for n, t in self._types.items() if n != self._query.name]
        blocks: list[str] = []
        for obj in ordered:
            lines = [f"type {obj.name} {{"]
            for fld in obj.fields.values():
                args = ""
                if fld.args:
                    parts = []
                    for arg in fld.args:
                        part = f"{arg.name}: {arg.type}"
                        if arg.has_default:
                            part += f" = {arg.default!r}"
                        parts.append(part)
                    args = "(" + ", ".join(parts) + ")"
                lines.append(f"  {fld.name}{args}: {_type_label(fld.type)}")
            lines.append("}")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)


__all__ = [
    "SchemaError",
    "ScalarType",
    "String",
    "Int",
    "Float",
    "Boolean",
    "ID",
    "SCALARS",
    "NonNull",
    "ListOf",
    "Argument",
    "Field",
    "ObjectType",
    "TypeRef",
    "Schema",
    "unwrap",
]
