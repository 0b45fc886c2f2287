from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .ast import EnumValue, Request, Selection, Variable, VariableDefinition
from .diagnostics import REQUEST_PARSE_ERROR, Diagnostics, Severity

_PUNCTUATORS = frozenset("{}()[]:$!=")
MAX_NESTING_DEPTH = 64
_NAME_RE = re.compile(r"[_A-Za-z][_0-9A-Za-z]*")
_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")
_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class RequestSyntaxError(Exception):
    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} (line {line}, column {column})")
        self.line = line
        self.column = column


@dataclass
class Token:
    kind: str  # "punct" | "name" | "string" | "int" | "float" | "eof"
    value: Any
    line: int
    column: int


def tokenize(src: str) -> List[Token]:
    tokens: List[Token] = []
    line = 1
    line_start = 0
    i = 0
    n = len(src)

    while i < n:
        ch = src[i]
        col = i - line_start + 1

        if ch == "\n":
            line += 1
            line_start = i + 1
            i += 1
            continue
        if ch in " \t\r,\ufeff":
            i += 1
            continue
        if ch == "#":
            while i < n and src[i] != "\n":
                i += 1
            continue
        if ch in _PUNCTUATORS:
            tokens.append(Token("punct", ch, line, col))
            i += 1
            continue
        if ch == '"':
            value, i = _read_string(src, i + 1, line, col)
            tokens.append(Token("string", value, line, col))
            continue
        if ch == "-" or ch.isdigit():
            match = _NUMBER_RE.match(src, i)
            if not match:
                raise RequestSyntaxError(f"Invalid number starting with {ch!r}", line, col)
            text = match.group(0)
            end = match.end()
            if end < n and (src[end].isalpha() or src[end] in "_."):
                raise RequestSyntaxError(f"Invalid number {src[i:end + 1]!r}", line, col)
            if match.group(1) or match.group(2):
                tokens.append(Token("float", float(text), line, col))
            else:
                tokens.append(Token("int", int(text), line, col))
            i = end
            continue
        match = _NAME_RE.match(src, i)
        if match:
            tokens.append(Token("name", match.group(0), line, col))
            i = match.end()
            continue
        raise RequestSyntaxError(f"Unexpected character {ch!r}", line, col)

    tokens.append(Token("eof", None, line, i - line_start + 1))
    return tokens


def _read_string(src: str, i: int, line: int, col: int) -> Tuple[str, int]:
    chars: List[str] = []
    n = len(src)
    while i < n:
        ch = src[i]
        if ch == '"':
            return "".join(chars), i + 1
        if ch == "\n":
            break
        if ch == "\\":
            if i + 1 >= n:
                break
            esc = src[i + 1]
            if esc == "u":
                code = src[i + 2 : i + 6]
                if len(code) != 4 or not all(c in "0123456789abcdefABCDEF" for c in code):
                    raise RequestSyntaxError(f"Invalid unicode escape \\u{code}", line, col)
                chars.append(chr(int(code, 16)))
                i += 6
                continue
            if esc not in _ESCAPES:
                raise RequestSyntaxError(f"Invalid escape sequence \\{esc}", line, col)
            chars.append(_ESCAPES[esc])
            i += 2
            continue
        chars.append(ch)
        i += 1
    raise RequestSyntaxError("Unterminated string", line, col)


class RequestParser:
    """Recursive-descent parser for the selection syntax.

    Accepts ``{ field(arg: value) { sub } }`` with an optional leading
    ``query [Name]`` and ``alias: field`` renames. Any syntax problem aborts
    the whole parse, as does nesting of selection sets, list values or list
    types beyond ``max_depth``.
    """

    def __init__(self, src: str, max_depth: int = MAX_NESTING_DEPTH):
        self.tokens = tokenize(src)
        self.pos = 0
        self.max_depth = max_depth
        self.depth = 0

    # --- token helpers ---
    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != "eof":
            self.pos += 1
        return tok

    def _is_punct(self, value: str) -> bool:
        tok = self._peek()
        return tok.kind == "punct" and tok.value == value

    def _expect_punct(self, value: str) -> Token:
        tok = self._peek()
        if tok.kind != "punct" or tok.value != value:
            raise RequestSyntaxError(f"Expected {value!r}, found {_describe(tok)}", tok.line, tok.column)
        return self._advance()

    def _expect_name(self) -> Token:
        tok = self._peek()
        if tok.kind != "name":
            raise RequestSyntaxError(f"Expected name, found {_describe(tok)}", tok.line, tok.column)
        return self._advance()

    def _enter(self, tok: Token) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            raise RequestSyntaxError("Request nested too deeply", tok.line, tok.column)

    def _leave(self) -> None:
        self.depth -= 1

    # --- grammar ---
    def parse(self) -> Request:
        name: Optional[str] = None
        definitions: List[VariableDefinition] = []
        tok = self._peek()
        if tok.kind == "name":
            if tok.value != "query":
                raise RequestSyntaxError(
                    f"Unsupported operation {tok.value!r}; only 'query' is supported", tok.line, tok.column
                )
            self._advance()
            if self._peek().kind == "name":
                name = self._advance().value
            if self._is_punct("("):
                definitions = self._parse_variable_definitions()

        selections = self._parse_selection_set()
        tok = self._peek()
        if tok.kind != "eof":
            raise RequestSyntaxError(f"Unexpected {_describe(tok)} after request", tok.line, tok.column)
        return Request(selections=selections, operation="query", name=name, variable_definitions=definitions)

    def _parse_variable_definitions(self) -> List[VariableDefinition]:
        open_tok = self._expect_punct("(")
        definitions: List[VariableDefinition] = []
        seen: set[str] = set()
        while not self._is_punct(")"):
            dollar = self._expect_punct("$")
            var_name = self._expect_name().value
            if var_name in seen:
                raise RequestSyntaxError(f"Duplicate variable ${var_name}", dollar.line, dollar.column)
            seen.add(var_name)
            self._expect_punct(":")
            type_name = self._parse_type()
            if self._is_punct("="):
                eq = self._advance()
                default = self._parse_value()
                if _contains_variable(default):
                    raise RequestSyntaxError("Variable default must be a constant", eq.line, eq.column)
                definitions.append(VariableDefinition(var_name, type_name, default))
            else:
                definitions.append(VariableDefinition(var_name, type_name))
        self._advance()
        if not definitions:
            raise RequestSyntaxError("Variable definitions must not be empty", open_tok.line, open_tok.column)
        return definitions

    def _parse_type(self) -> str:
        if self._is_punct("["):
            self._enter(self._advance())
            inner = self._parse_type()
            self._expect_punct("]")
            self._leave()
            text = f"[{inner}]"
        else:
            text = self._expect_name().value
        if self._is_punct("!"):
            self._advance()
            text += "!"
        return text

    def _parse_selection_set(self) -> List[Selection]:
        open_tok = self._expect_punct("{")
        self._enter(open_tok)
        selections: List[Selection] = []
        while not self._is_punct("}"):
            if self._peek().kind == "eof":
                raise RequestSyntaxError("Unterminated selection set", open_tok.line, open_tok.column)
            selections.append(self._parse_selection())
        self._advance()
        self._leave()
        if not selections:
            raise RequestSyntaxError("Selection set must not be empty", open_tok.line, open_tok.column)
        return selections

    def _parse_selection(self) -> Selection:
        first = self._expect_name()
        alias: Optional[str] = None
        name = first.value
        if self._is_punct(":"):
            self._advance()
            alias = name
            name = self._expect_name().value

        arguments: Dict[str, Any] = {}
        if self._is_punct("("):
            arguments = self._parse_arguments()

        selections: List[Selection] = []
        if self._is_punct("{"):
            selections = self._parse_selection_set()

        return Selection(
            name=name,
            alias=alias,
            arguments=arguments,
            selections=selections,
            line=first.line,
            column=first.column,
        )

    def _parse_arguments(self) -> Dict[str, Any]:
        open_tok = self._expect_punct("(")
        arguments: Dict[str, Any] = {}
        while not self._is_punct(")"):
            name_tok = self._expect_name()
            if name_tok.value in arguments:
                raise RequestSyntaxError(
                    f"Duplicate argument {name_tok.value!r}", name_tok.line, name_tok.column
                )
            self._expect_punct(":")
            arguments[name_tok.value] = self._parse_value()
        self._advance()
        if not arguments:
            raise RequestSyntaxError("Argument list must not be empty", open_tok.line, open_tok.column)
        return arguments

    def _parse_value(self) -> Any:
        tok = self._peek()
        if tok.kind in {"string", "int", "float"}:
            self._advance()
            return tok.value
        if tok.kind == "name":
            self._advance()
            if tok.value == "true":
                return True
            if tok.value == "false":
                return False
            if tok.value == "null":
                return None
            return EnumValue(tok.value)
        if tok.kind == "punct" and tok.value == "$":
            self._advance()
            return Variable(self._expect_name().value)
        if tok.kind == "punct" and tok.value == "[":
            self._enter(self._advance())
            items: List[Any] = []
            while not self._is_punct("]"):
                if self._peek().kind == "eof":
                    raise RequestSyntaxError("Unterminated list value", tok.line, tok.column)
                items.append(self._parse_value())
            self._advance()
            self._leave()
            return items
        raise RequestSyntaxError(f"Expected value, found {_describe(tok)}", tok.line, tok.column)


def _contains_variable(value: Any) -> bool:
    if isinstance(value, Variable):
        return True
    if isinstance(value, list):
        return any(_contains_variable(item) for item in value)
    return False


def _describe(tok: Token) -> str:
    if tok.kind == "eof":
        return "end of input"
    if tok.kind == "string":
        return f"string {tok.value!r}"
    return f"{tok.value!r}"


def parse_request(src: str) -> Tuple[Optional[Request], Diagnostics]:
    """Parse a request string into a :class:`Request`.

    Returns ``(None, diagnostics)`` with a single ``REQUEST_PARSE_ERROR`` when
    the source cannot be parsed.
    """

    diagnostics = Diagnostics()
    if not isinstance(src, str):
        diagnostics.add(
            code=REQUEST_PARSE_ERROR,
            message="Request must be a string",
            path="$",
            severity=Severity.ERROR,
        )
        return None, diagnostics

    try:
        request = RequestParser(src).parse()
    except RequestSyntaxError as exc:
        diagnostics.add(
            code=REQUEST_PARSE_ERROR,
            message=f"Syntax error: {exc}",
            path="$",
            severity=Severity.ERROR,
        )
        return None, diagnostics
    return request, diagnostics
