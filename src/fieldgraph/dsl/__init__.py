from .ast import EnumValue, Request, Selection, Variable, VariableDefinition
from .diagnostics import Diagnostic, Diagnostics, Severity
from .parser import RequestParser, RequestSyntaxError, parse_request

__all__ = [
    "EnumValue",
    "Request",
    "Selection",
    "Variable",
    "VariableDefinition",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "RequestParser",
    "RequestSyntaxError",
    "parse_request",
]
