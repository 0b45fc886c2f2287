from pydantic import __version__ as _pydantic_version

# Fieldgraph relies on the Pydantic v2 API (model_validate/model_dump, etc.).
# Import errors should surface early if an incompatible version is installed.
if not _pydantic_version.startswith("2"):
    raise ImportError(
        "fieldgraph requires pydantic>=2.0; detected version %s" % _pydantic_version
    )

from .dsl import Diagnostic, Diagnostics, Request, Selection, Severity, Variable, parse_request
from .schema import (
    ID,
    Argument,
    Boolean,
    ConstantResolver,
    Field,
    Float,
    FunctionResolver,
    Int,
    ListOf,
    NonNull,
    ObjectType,
    Resolver,
    ScalarType,
    Schema,
    SchemaError,
    SchemaRegistry,
    String,
)
from .execution import (
    ExecutionContext,
    ExecutionResult,
    Executor,
    MissingServiceError,
    ResolveContext,
    execute,
)

__all__ = [
    # request language
    "Request",
    "Selection",
    "Variable",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "parse_request",
    # schema
    "ScalarType",
    "String",
    "Int",
    "Float",
    "Boolean",
    "ID",
    "NonNull",
    "ListOf",
    "Argument",
    "Field",
    "ObjectType",
    "Schema",
    "SchemaError",
    "SchemaRegistry",
    "Resolver",
    "FunctionResolver",
    "ConstantResolver",
    # execution
    "ExecutionContext",
    "ResolveContext",
    "MissingServiceError",
    "ExecutionResult",
    "Executor",
    "execute",
]
