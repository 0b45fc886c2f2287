"""Schema definitions and the registry that builds them."""

from .types import (
    ID,
    SCALARS,
    Argument,
    Boolean,
    Field,
    Float,
    Int,
    ListOf,
    NonNull,
    ObjectType,
    ScalarType,
    Schema,
    SchemaError,
    String,
    TypeRef,
    unwrap,
)
from .resolvers import ConstantResolver, FunctionResolver, Resolver
from .registry import SchemaRegistry

__all__ = [
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
    "SchemaError",
    "unwrap",
    "Resolver",
    "FunctionResolver",
    "ConstantResolver",
    "SchemaRegistry",
]
