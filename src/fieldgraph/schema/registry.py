from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Union

from .types import (
    SCALARS,
    Field,
    NonNull,
    ObjectType,
    ScalarType,
    Schema,
    SchemaError,
    unwrap,
)

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")

FieldsSpec = Union[Iterable[Field], Mapping[str, Field]]


def _check_name(kind: str, name: str) -> None:
    if not isinstance(name, str) or not _NAME_RE.match(name):
        raise SchemaError(f"Invalid {kind} name: {name!r}")
    if name.startswith("__"):
        raise SchemaError(f"{kind.capitalize()} name {name!r} is reserved")


class SchemaRegistry:
    """Collects named object types and produces an immutable :class:`Schema`.

    The registry is populated once, then frozen by :meth:`define_root_query`;
    further definitions raise :class:`SchemaError`.
    """

    def __init__(self):
        self._types: Dict[str, ObjectType] = {}
        self._schema: Optional[Schema] = None

    @property
    def frozen(self) -> bool:
        return self._schema is not None

    def has_type(self, name: str) -> bool:
        return name in self._types

    def get(self, name: str) -> Optional[ObjectType]:
        return self._types.get(name)

    def define_type(self, name: str, fields: FieldsSpec, description: Optional[str] = None) -> ObjectType:
        if self.frozen:
            raise SchemaError(f"Cannot define type {name!r}: registry is frozen")
        _check_name("type", name)
        if name in self._types or name in SCALARS:
            raise SchemaError(f"Duplicate type name: {name}")

        obj = ObjectType(name=name, fields=self._build_fields(name, fields), description=description)
        self._types[name] = obj
        logger.debug("Registered type %s with fields %s", name, obj.field_names())
        return obj

    def define_root_query(self, fields: FieldsSpec, name: str = "RootQuery") -> Schema:
        root = self.define_type(name, fields, description="Root query type")
        try:
            self._check_references()
        except SchemaError:
            del self._types[name]
            raise
        self._schema = Schema(query=root, types=self._types)
        logger.debug("Schema built: root=%s types=%d", name, len(self._types))
        return self._schema

    def build(self) -> Schema:
        if self._schema is None:
            raise SchemaError("Schema requires a root query type; call define_root_query() first")
        return self._schema

    # --- helpers ---
    def _build_fields(self, type_name: str, fields: FieldsSpec) -> Mapping[str, Field]:
        if isinstance(fields, Mapping):
            items = list(fields.items())
            for key, fld in items:
                if key != fld.name:
                    raise SchemaError(f"Field key {key!r} does not match field name {fld.name!r} on {type_name}")
            field_list = [fld for _, fld in items]
        else:
            field_list = list(fields)

        if not field_list:
            raise SchemaError(f"Type {type_name} must declare at least one field")

        by_name: Dict[str, Field] = {}
        for fld in field_list:
            if not isinstance(fld, Field):
                raise SchemaError(f"Type {type_name} received a non-Field entry: {fld!r}")
            _check_name("field", fld.name)
            if fld.name in by_name:
                raise SchemaError(f"Duplicate field name {fld.name!r} on type {type_name}")
            self._check_arguments(type_name, fld)
            by_name[fld.name] = fld
        return MappingProxyType(by_name)

    @staticmethod
    def _check_arguments(type_name: str, fld: Field) -> None:
        seen: set[str] = set()
        for arg in fld.args:
            _check_name("argument", arg.name)
            if arg.name in seen:
                raise SchemaError(f"Duplicate argument {arg.name!r} on {type_name}.{fld.name}")
            seen.add(arg.name)
            inner = arg.type.of_type if isinstance(arg.type, NonNull) else arg.type
            if not isinstance(inner, ScalarType):
                raise SchemaError(
                    f"Argument {type_name}.{fld.name}({arg.name}) must be a scalar or non-null scalar, "
                    f"got {arg.type}"
                )
            if arg.has_default and arg.default is not None:
                try:
                    inner.parse_value(arg.default)
                except TypeError as exc:
                    raise SchemaError(f"Invalid default for {type_name}.{fld.name}({arg.name}): {exc}") from exc

    def _check_references(self) -> None:
        for obj in self._types.values():
            for fld in obj.fields.values():
                named = unwrap(fld.type)
                if isinstance(named, ScalarType):
                    continue
                if isinstance(named, str):
                    if named not in self._types and named not in SCALARS:
                        raise SchemaError(f"Unknown type {named!r} referenced by {obj.name}.{fld.name}")
                    continue
                if isinstance(named, ObjectType):
                    if self._types.get(named.name) is not named:
                        raise SchemaError(
                            f"Type {named.name!r} referenced by {obj.name}.{fld.name} is not registered"
                        )
                    continue
                raise SchemaError(f"Unsupported type {named!r} on {obj.name}.{fld.name}")


__all__ = ["SchemaRegistry"]
