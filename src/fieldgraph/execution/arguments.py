from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..dsl.ast import EnumValue, Variable
from ..dsl.diagnostics import ARGUMENT_INVALID, ARGUMENT_MISSING, ARGUMENT_UNKNOWN, Diagnostics, Severity
from ..schema.types import Field, NonNull


def bind_arguments(
    field: Field,
    supplied: Mapping[str, Any],
    variables: Mapping[str, Any],
    diagnostics: Diagnostics,
    path: str,
) -> Optional[Dict[str, Any]]:
    """Bind literal arguments of a selection to ``field``'s argument contract.

    Returns the coerced arguments, or ``None`` after recording diagnostics
    when the contract is not satisfied.
    """

    ok = True
    bound: Dict[str, Any] = {}

    for name in supplied:
        if field.argument(name) is None:
            diagnostics.add(
                code=ARGUMENT_UNKNOWN,
                message=f"Unknown argument {name!r} on field {field.name!r}",
                path=path,
                severity=Severity.ERROR,
            )
            ok = False

    missing: List[str] = []
    for arg in field.args:
        nullable = not isinstance(arg.type, NonNull)
        scalar = arg.type.of_type if isinstance(arg.type, NonNull) else arg.type

        if arg.name not in supplied:
            if arg.has_default:
                bound[arg.name] = arg.default
            elif arg.required:
                missing.append(arg.name)
            continue

        raw = supplied[arg.name]
        if isinstance(raw, Variable):
            if raw.name not in variables:
                diagnostics.add(
                    code=ARGUMENT_INVALID,
                    message=f"Variable ${raw.name} for argument {arg.name!r} is not defined",
                    path=path,
                    severity=Severity.ERROR,
                )
                ok = False
                continue
            raw = variables[raw.name]

        if raw is None:
            if not nullable:
                diagnostics.add(
                    code=ARGUMENT_INVALID,
                    message=f"Argument {arg.name!r} of type {arg.type} must not be null",
                    path=path,
                    severity=Severity.ERROR,
                )
                ok = False
                continue
            bound[arg.name] = None
            continue

        if isinstance(raw, EnumValue):
            diagnostics.add(
                code=ARGUMENT_INVALID,
                message=f"Argument {arg.name!r} of type {arg.type} cannot take enum value {raw.name}",
                path=path,
                severity=Severity.ERROR,
            )
            ok = False
            continue

        try:
            bound[arg.name] = scalar.parse_value(raw)
        except TypeError as exc:
            diagnostics.add(
                code=ARGUMENT_INVALID,
                message=f"Argument {arg.name!r} has invalid value: {exc}",
                path=path,
                severity=Severity.ERROR,
            )
            ok = False

    if missing:
        names = ", ".join(repr(m) for m in missing)
        diagnostics.add(
            code=ARGUMENT_MISSING,
            message=f"Field {field.name!r} is missing required argument(s): {names}",
            path=path,
            severity=Severity.ERROR,
        )
        ok = False

    return bound if ok else None


__all__ = ["bind_arguments"]
