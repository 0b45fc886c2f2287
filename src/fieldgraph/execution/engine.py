from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Tuple, Union

from ..dsl.ast import Request, Selection
from ..dsl.diagnostics import (
    FIELD_CONFLICT,
    FIELD_NOT_FOUND,
    NULL_VALUE,
    RESOLVER_ERROR,
    SELECTION_INVALID,
    Diagnostics,
    Severity,
)
from ..dsl.parser import parse_request
from ..schema.types import SCALARS, Field, ListOf, NonNull, ObjectType, ScalarType, Schema, TypeRef, unwrap
from .arguments import bind_arguments
from .context import ExecutionContext, ResolveContext
from .result import ExecutionResult

logger = logging.getLogger(__name__)

TYPENAME_FIELD = "__typename"
DEFAULT_MAX_DEPTH = 64

# Marks a field that produced an error and must be left out of the result.
_OMIT: Any = object()

Path = Tuple[Union[str, int], ...]


class _CompletionError(Exception):
    def __init__(self, code: str, message: str, path: Path):
        super().__init__(message)
        self.code = code
        self.message = message
        self.path = path


def format_path(path: Path) -> str:
    if not path:
        return "$"
    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else part
    return out


def _depth(path: Path) -> int:
    return sum(1 for part in path if isinstance(part, str))


def _default_resolve(source: Any, field: Field) -> Any:
    if source is None:
        return field.default
    if isinstance(source, Mapping):
        return source.get(field.name, field.default)
    value = getattr(source, field.name, _OMIT)
    return field.default if value is _OMIT else value


class Executor:
    """Single resolution pass over a parsed request.

    Holds the only mutable state of a pass (the diagnostics); create one per
    request. The schema is only read.
    """

    def __init__(
        self,
        schema: Schema,
        context: ExecutionContext,
        variables: Mapping[str, Any],
        root_value: Any = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.schema = schema
        self.context = context
        self.variables = variables
        self.root_value = root_value
        self.max_depth = max_depth
        self.diagnostics = Diagnostics()

    def run(self, request: Request) -> Dict[str, Any]:
        return self._execute_selections(self.schema.query_type, self.root_value, request.selections, ())

    # --- selection handling ---
    def _collect(self, obj_type: ObjectType, selections: List[Selection], path: Path) -> Dict[str, Selection]:
        grouped: Dict[str, Selection] = {}
        for sel in selections:
            key = sel.response_key
            existing = grouped.get(key)
            if existing is None:
                grouped[key] = Selection(
                    name=sel.name,
                    alias=sel.alias,
                    arguments=dict(sel.arguments),
                    selections=list(sel.selections),
                    line=sel.line,
                    column=sel.column,
                )
                continue
            if existing.name != sel.name or existing.arguments != sel.arguments:
                self.diagnostics.add(
                    code=FIELD_CONFLICT,
                    message=(
                        f"Fields {existing.name!r} and {sel.name!r} conflict on response key {key!r} "
                        f"of type {obj_type.name!r}"
                    ),
                    path=format_path(path + (key,)),
                    severity=Severity.ERROR,
                )
                continue
            existing.selections.extend(sel.selections)
        return grouped

    def _execute_selections(
        self,
        obj_type: ObjectType,
        source: Any,
        selections: List[Selection],
        path: Path,
    ) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for key, sel in self._collect(obj_type, selections, path).items():
            value = self._resolve_field(obj_type, source, sel, path + (key,))
            if value is not _OMIT:
                data[key] = value
        return data

    def _resolve_field(self, obj_type: ObjectType, source: Any, sel: Selection, path: Path) -> Any:
        where = format_path(path)

        if sel.name == TYPENAME_FIELD:
            if sel.arguments or sel.selections:
                self._error(SELECTION_INVALID, f"{TYPENAME_FIELD} takes no arguments or sub-selection", where)
                return _OMIT
            return obj_type.name

        fld = obj_type.field(sel.name)
        if fld is None:
            self._error(FIELD_NOT_FOUND, f"Field {sel.name!r} not found on type {obj_type.name!r}", where)
            return _OMIT

        arguments = bind_arguments(fld, sel.arguments, self.variables, self.diagnostics, where)
        if arguments is None:
            return _OMIT

        named = self._named_type(fld.type)
        if isinstance(named, ObjectType) and not sel.selections:
            self._error(
                SELECTION_INVALID,
                f"Field {fld.name!r} of type {fld.type} requires a sub-selection",
                where,
            )
            return _OMIT
        if isinstance(named, ScalarType) and sel.selections:
            self._error(
                SELECTION_INVALID,
                f"Field {fld.name!r} of scalar type {fld.type} cannot have a sub-selection",
                where,
            )
            return _OMIT
        if sel.selections and _depth(path) > self.max_depth:
            self._error(
                SELECTION_INVALID,
                f"Field {fld.name!r} exceeds the maximum selection depth of {self.max_depth}",
                where,
            )
            return _OMIT

        try:
            raw = self._invoke(obj_type, fld, source, arguments, path)
        except Exception as exc:
            logger.warning("Resolver for %s.%s failed: %s", obj_type.name, fld.name, exc, exc_info=True)
            self._error(RESOLVER_ERROR, f"Resolver for {obj_type.name}.{fld.name} failed: {exc}", where)
            return _OMIT

        try:
            return self._complete(fld.type, raw, sel, path)
        except _CompletionError as exc:
            self._error(exc.code, exc.message, format_path(exc.path))
            return _OMIT

    def _invoke(self, obj_type: ObjectType, fld: Field, source: Any, arguments: Dict[str, Any], path: Path) -> Any:
        if fld.resolver is None:
            return _default_resolve(source, fld)
        ctx = ResolveContext(
            execution=self.context,
            source=source,
            field_name=fld.name,
            type_name=obj_type.name,
            path=path,
        )
        return fld.resolver.resolve(ctx, arguments)

    # --- value completion ---
    def _complete(self, type_: TypeRef, value: Any, sel: Selection, path: Path) -> Any:
        if isinstance(type_, NonNull):
            if value is None:
                raise _CompletionError(NULL_VALUE, f"Non-null field {sel.name!r} resolved to null", path)
            return self._complete(type_.of_type, value, sel, path)

        if value is None:
            return None

        if isinstance(type_, ListOf):
            if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
                raise _CompletionError(
                    RESOLVER_ERROR,
                    f"Field {sel.name!r} expected a list, got {type(value).__name__}",
                    path,
                )
            return [self._complete(type_.of_type, item, sel, path + (idx,)) for idx, item in enumerate(value)]

        named = self._named_type(type_)
        if isinstance(named, ScalarType):
            try:
                return named.serialize(value)
            except (TypeError, ValueError) as exc:
                raise _CompletionError(RESOLVER_ERROR, f"Field {sel.name!r}: {exc}", path) from exc

        return self._execute_selections(named, value, sel.selections, path)

    def _named_type(self, type_: TypeRef) -> Union[ScalarType, ObjectType]:
        named = unwrap(type_)
        if isinstance(named, str):
            resolved = SCALARS.get(named) or self.schema.type(named)
            if resolved is None:
                raise KeyError(f"Unknown type {named!r}")
            return resolved
        return named

    def _error(self, code: str, message: str, path: str) -> None:
        self.diagnostics.add(code=code, message=message, path=path, severity=Severity.ERROR)


def execute(
    schema: Schema,
    request: Union[str, Request],
    *,
    context: Optional[ExecutionContext] = None,
    variables: Optional[Mapping[str, Any]] = None,
    root_value: Any = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ExecutionResult:
    """Resolve ``request`` against ``schema``.

    Per-field failures are collected into ``result.errors`` and the
    affected fields are left out of ``result.data``; only a parse failure
    yields an empty result. Object fields nested deeper than ``max_depth``
    are reported as ``SELECTION_INVALID``.
    """

    t0 = time.perf_counter()
    if isinstance(request, Request):
        parsed: Optional[Request] = request
        diagnostics = Diagnostics()
    else:
        parsed, diagnostics = parse_request(request)

    if parsed is None:
        logger.debug("Request rejected by parser: %s", [m.message for m in diagnostics.messages])
        return ExecutionResult(data={}, errors=diagnostics)

    bound_variables = {**parsed.variable_defaults(), **(variables or {})}
    executor = Executor(schema, context or ExecutionContext(), bound_variables, root_value, max_depth=max_depth)
    data = executor.run(parsed)
    diagnostics.extend(executor.diagnostics)

    logger.debug(
        "Executed request (fields=%d, errors=%d) in %.3fs",
        len(data),
        len(diagnostics.errors()),
        time.perf_counter() - t0,
    )
    return ExecutionResult(data=data, errors=diagnostics)


__all__ = ["Executor", "execute", "format_path", "DEFAULT_MAX_DEPTH", "TYPENAME_FIELD"]
