import pytest

from fieldgraph.dsl import Diagnostics, EnumValue, Variable, parse_request
from fieldgraph.dsl.diagnostics import REQUEST_PARSE_ERROR
from fieldgraph.dsl.parser import MAX_NESTING_DEPTH, RequestParser, RequestSyntaxError


def test_parse_nested_selection_with_string_argument():
    request, diags = parse_request('{user(login:"alice"){login admin permissions}}')
    assert isinstance(diags, Diagnostics)
    assert not diags.has_errors()
    assert request is not None
    assert [s.name for s in request.selections] == ["user"]
    user = request.selections[0]
    assert user.arguments == {"login": "alice"}
    assert [s.name for s in user.selections] == ["login", "admin", "permissions"]
    assert all(s.selections == [] for s in user.selections)


def test_parse_query_keyword_and_operation_name():
    request, diags = parse_request("query Lookup { hello }")
    assert not diags.has_errors()
    assert request.name == "Lookup"
    assert request.operation == "query"
    assert request.selections[0].name == "hello"


def test_parse_alias_and_commas_are_whitespace():
    request, diags = parse_request("{ me: user(login: \"bob\",) { login, active } }")
    assert not diags.has_errors()
    sel = request.selections[0]
    assert sel.alias == "me"
    assert sel.name == "user"
    assert sel.response_key == "me"
    assert [s.name for s in sel.selections] == ["login", "active"]


def test_parse_literal_values():
    request, diags = parse_request(
        '{ f(a: 1, b: -2.5, c: true, d: false, e: null, g: ACTIVE, h: [1, "x"], i: $login) }'
    )
    assert not diags.has_errors()
    args = request.selections[0].arguments
    assert args["a"] == 1 and isinstance(args["a"], int)
    assert args["b"] == -2.5
    assert args["c"] is True
    assert args["d"] is False
    assert args["e"] is None
    assert args["g"] == EnumValue("ACTIVE")
    assert args["h"] == [1, "x"]
    assert args["i"] == Variable("login")


def test_parse_string_escapes():
    request, diags = parse_request(r'{ f(s: "a\"b\\c\ndA") }')
    assert not diags.has_errors()
    assert request.selections[0].arguments["s"] == 'a"b\\c\ndA'


def test_parse_ignores_comments():
    src = """
    # leading comment
    {
      hello  # trailing comment
    }
    """
    request, diags = parse_request(src)
    assert not diags.has_errors()
    assert [s.name for s in request.selections] == ["hello"]


def test_parse_records_positions():
    request, _ = parse_request("{\n  hello\n}")
    sel = request.selections[0]
    assert (sel.line, sel.column) == (2, 3)


@pytest.mark.parametrize(
    "src",
    [
        "",
        "{}",
        "{ user(login: \"alice\") { login }",
        "{ user(login: ) { login } }",
        "{ user(login: \"alice\" { login } }",
        "{ f(a: 1, a: 2) }",
        "{ f() }",
        '{ f(s: "unterminated) }',
        "{ hello } trailing",
        "mutation { hello }",
        "{ f(a: 12abc) }",
        "{ hello @ }",
    ],
)
def test_parse_failure_yields_single_error_and_no_request(src):
    request, diags = parse_request(src)
    assert request is None
    assert diags.has_errors()
    assert len(diags.errors()) == 1
    assert diags.errors()[0].code == REQUEST_PARSE_ERROR
    assert diags.errors()[0].path == "$"


def test_parse_error_message_has_location():
    _, diags = parse_request("{\n  user(login: ) }")
    message = diags.errors()[0].message
    assert "line 2" in message
    assert "column" in message


def test_parse_non_string_source():
    request, diags = parse_request(None)  # type: ignore[arg-type]
    assert request is None
    assert [m.code for m in diags.messages] == [REQUEST_PARSE_ERROR]


def test_parse_variable_definitions():
    request, diags = parse_request('query Q($login: String!, $ids: [Int!]!, $n: Int = 5) { f(a: $login) }')
    assert not diags.has_errors()
    defs = {d.name: d for d in request.variable_definitions}
    assert defs["login"].type == "String!"
    assert defs["ids"].type == "[Int!]!"
    assert not defs["login"].has_default
    assert defs["n"].default == 5
    assert request.variable_defaults() == {"n": 5}


@pytest.mark.parametrize(
    "src",
    [
        "query ($a: Int, $a: Int) { f }",
        "query ($a: Int = $b) { f }",
        "query () { f }",
        "query ($a) { f }",
    ],
)
def test_parse_invalid_variable_definitions(src):
    request, diags = parse_request(src)
    assert request is None
    assert [m.code for m in diags.messages] == [REQUEST_PARSE_ERROR]


@pytest.mark.parametrize(
    "src",
    [
        "{hello(x: " + "[" * 3000 + "}",
        "{" + "a{" * 1500 + "b" + "}" * 1501,
        "query ($v: " + "[" * 3000 + "Int" + "]" * 3000 + ") { f }",
    ],
)
def test_deep_nesting_is_a_parse_error(src):
    request, diags = parse_request(src)
    assert request is None
    assert [m.code for m in diags.messages] == [REQUEST_PARSE_ERROR]
    assert "nested too deeply" in diags.messages[0].message


def test_nesting_up_to_limit_is_accepted():
    src = "{" + "a{" * (MAX_NESTING_DEPTH - 1) + "b" + "}" * MAX_NESTING_DEPTH
    request, diags = parse_request(src)
    assert not diags.has_errors()
    depth = 0
    sel = request.selections[0]
    while sel.selections:
        depth += 1
        sel = sel.selections[0]
    assert sel.name == "b"
    assert depth == MAX_NESTING_DEPTH - 1


def test_parser_depth_is_configurable():
    assert RequestParser("{ a(x: [[1]]) }", max_depth=3).parse().selections[0].arguments == {"x": [[1]]}
    with pytest.raises(RequestSyntaxError, match="nested too deeply"):
        RequestParser("{ a(x: [[1]]) }", max_depth=2).parse()
