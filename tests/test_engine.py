from __future__ import annotations

import threading

import pytest

from fieldgraph import (
    Argument,
    Boolean,
    ConstantResolver,
    ExecutionContext,
    Field,
    Float,
    Int,
    ListOf,
    NonNull,
    SchemaRegistry,
    Selection,
    String,
    execute,
    parse_request,
)
from fieldgraph.dsl import diagnostics as codes


class CountingBooks:
    def __init__(self):
        self.calls = 0
        self.books = {
            1: {"id": 1, "title": "Dune", "pages": 412, "rating": 4.5, "tags": ["sf", "classic"]},
            2: {"id": 2, "title": "Emma", "pages": 474, "rating": 3.9, "tags": []},
        }

    def get(self, book_id):
        self.calls += 1
        return self.books.get(book_id)


def _book(ctx, id):
    return ctx.service("books").get(id)


def _books(ctx, limit=None):
    books = list(ctx.service("books").books.values())
    return books[:limit] if limit is not None else books


def _boom(ctx):
    raise RuntimeError("backend unavailable")


def build_schema():
    registry = SchemaRegistry()
    registry.define_type(
        "Book",
        [
            Field("id", NonNull(Int)),
            Field("title", String),
            Field("pages", Int),
            Field("rating", Float),
            Field("tags", ListOf(String)),
            Field("inStock", Boolean, default=True),
            Field("related", "Book", resolver=lambda ctx: ctx.service("books").get(2)),
        ],
    )
    return registry.define_root_query(
        [
            Field("hello", String, resolver=lambda ctx: "world"),
            Field(
                "greet",
                String,
                args=(Argument("name", String, default="stranger"),),
                resolver=lambda ctx, name: f"hi {name}",
            ),
            Field("book", "Book", args=(Argument("id", NonNull(Int)),), resolver=_book),
            Field("books", ListOf("Book"), args=(Argument("limit", Int),), resolver=_books),
            Field("broken", String, resolver=_boom),
            Field("missingId", NonNull(String), resolver=lambda ctx: None),
            Field("notAList", ListOf(String), resolver=lambda ctx: "abc"),
            Field("badInt", Int, resolver=lambda ctx: "many"),
            Field("version", String, default="1.0"),
        ]
    )


@pytest.fixture
def schema():
    return build_schema()


@pytest.fixture
def store():
    return CountingBooks()


@pytest.fixture
def context(store):
    return ExecutionContext(services={"books": store})


def test_all_declared_fields_resolve_without_errors(schema, context):
    result = execute(schema, "{ hello book(id: 1) { id title pages rating tags } }", context=context)
    assert result.ok
    assert list(result.errors) == []
    assert result.data == {
        "hello": "world",
        "book": {"id": 1, "title": "Dune", "pages": 412, "rating": 4.5, "tags": ["sf", "classic"]},
    }
    assert set(result.data) == {"hello", "book"}


def test_unknown_fields_are_reported_once_each_and_siblings_survive(schema, context):
    result = execute(schema, "{ hello nope book(id: 1) { title ghost } alsoNope }", context=context)
    not_found = result.errors.with_code(codes.FIELD_NOT_FOUND)
    assert len(not_found) == 3
    assert [d.path for d in not_found] == ["nope", "book.ghost", "alsoNope"]
    assert result.data == {"hello": "world", "book": {"title": "Dune"}}
    assert result.partial


def test_missing_required_argument_is_local_to_field(schema, context, store):
    result = execute(schema, "{ hello book { title } }", context=context)
    errors = result.errors.errors()
    assert len(errors) == 1
    assert errors[0].code == codes.ARGUMENT_MISSING
    assert errors[0].path == "book"
    assert result.data == {"hello": "world"}
    assert store.calls == 0


def test_argument_default_is_applied(schema, context):
    result = execute(schema, '{ a: greet b: greet(name: "ann") }', context=context)
    assert result.ok
    assert result.data == {"a": "hi stranger", "b": "hi ann"}


@pytest.mark.parametrize(
    "query, code",
    [
        ('{ book(id: "one") { title } }', codes.ARGUMENT_INVALID),
        ("{ book(id: null) { title } }", codes.ARGUMENT_INVALID),
        ("{ book(id: 1, extra: 2) { title } }", codes.ARGUMENT_UNKNOWN),
        ("{ book(id: $missing) { title } }", codes.ARGUMENT_INVALID),
        ("{ book(id: ONE) { title } }", codes.ARGUMENT_INVALID),
    ],
)
def test_argument_errors(schema, context, query, code):
    result = execute(schema, query, context=context)
    assert [d.code for d in result.errors] == [code]
    assert result.data == {}


def test_variables_are_substituted(schema, context):
    result = execute(schema, "{ book(id: $id) { title } }", context=context, variables={"id": 2})
    assert result.ok
    assert result.data == {"book": {"title": "Emma"}}


def test_malformed_request_yields_empty_result_and_single_parse_error(schema, context, store):
    result = execute(schema, "{ book(id: 1) { title }", context=context)
    assert result.data == {}
    assert [d.code for d in result.errors] == [codes.REQUEST_PARSE_ERROR]
    assert store.calls == 0
    assert not result.partial


def test_parse_error_is_independent_of_schema():
    registry = SchemaRegistry()
    other = registry.define_root_query([Field("x", String)])
    for s in (build_schema(), other):
        result = execute(s, "{{")
        assert result.data == {}
        assert len(result.errors) == 1


def test_resolver_exception_is_recorded_and_field_omitted(schema, context, caplog):
    with caplog.at_level("WARNING", logger="fieldgraph.execution.engine"):
        result = execute(schema, "{ hello broken }", context=context)
    assert result.data == {"hello": "world"}
    errors = result.errors.errors()
    assert [e.code for e in errors] == [codes.RESOLVER_ERROR]
    assert "backend unavailable" in errors[0].message
    assert errors[0].path == "broken"
    assert any("RootQuery.broken" in rec.getMessage() for rec in caplog.records)


def test_missing_service_is_a_resolver_error(schema):
    result = execute(schema, "{ hello book(id: 1) { title } }")
    assert result.data == {"hello": "world"}
    assert [e.code for e in result.errors] == [codes.RESOLVER_ERROR]
    assert "books" in result.errors.errors()[0].message


def test_non_null_violation_omits_field(schema, context):
    result = execute(schema, "{ hello missingId }", context=context)
    assert result.data == {"hello": "world"}
    assert [e.code for e in result.errors] == [codes.NULL_VALUE]


def test_unexpected_shapes_are_resolver_errors(schema, context):
    result = execute(schema, "{ notAList badInt hello }", context=context)
    assert result.data == {"hello": "world"}
    assert [e.path for e in result.errors] == ["notAList", "badInt"]
    assert all(e.code == codes.RESOLVER_ERROR for e in result.errors)


def test_null_object_is_kept(schema, context):
    result = execute(schema, "{ book(id: 99) { title } }", context=context)
    assert result.ok
    assert result.data == {"book": None}


def test_default_passthrough_uses_literal_default(schema, context):
    result = execute(schema, "{ version book(id: 2) { inStock } }", context=context)
    assert result.ok
    assert result.data == {"version": "1.0", "book": {"inStock": True}}


def test_lists_of_objects_and_nested_resolvers(schema, context):
    result = execute(schema, "{ books(limit: 2) { id related { title } } }", context=context)
    assert result.ok
    assert result.data == {
        "books": [
            {"id": 1, "related": {"title": "Emma"}},
            {"id": 2, "related": {"title": "Emma"}},
        ]
    }


def test_nested_errors_carry_list_index_path(schema, context):
    result = execute(schema, "{ books { id nope } }", context=context)
    assert result.data == {"books": [{"id": 1}, {"id": 2}]}
    assert [e.path for e in result.errors] == ["books[0].nope", "books[1].nope"]


def test_aliases_and_typename(schema, context):
    result = execute(
        schema,
        "{ __typename first: book(id: 1) { __typename title } second: book(id: 2) { title } }",
        context=context,
    )
    assert result.ok
    assert result.data == {
        "__typename": "RootQuery",
        "first": {"__typename": "Book", "title": "Dune"},
        "second": {"title": "Emma"},
    }


def test_repeated_field_merges_sub_selections(schema, context):
    result = execute(schema, "{ book(id: 1) { title } book(id: 1) { pages } }", context=context)
    assert result.ok
    assert result.data == {"book": {"title": "Dune", "pages": 412}}


def test_conflicting_response_keys_are_reported(schema, context):
    result = execute(schema, "{ book(id: 1) { title } book(id: 2) { title } }", context=context)
    assert result.data == {"book": {"title": "Dune"}}
    assert [e.code for e in result.errors] == [codes.FIELD_CONFLICT]


def test_selection_shape_errors(schema, context):
    result = execute(schema, "{ book(id: 1) hello { x } }", context=context)
    assert result.data == {}
    assert [e.code for e in result.errors] == [codes.SELECTION_INVALID, codes.SELECTION_INVALID]


def test_parsed_request_is_accepted_and_not_mutated(schema, context):
    request, _ = parse_request("{ book(id: 1) { title } book(id: 1) { pages } }")
    first = execute(schema, request, context=context)
    second = execute(schema, request, context=context)
    assert first.data == second.data == {"book": {"title": "Dune", "pages": 412}}
    assert len(request.selections[0].selections) == 1


def test_execution_is_idempotent(schema, context):
    query = "{ hello nope book(id: 1) { title tags } broken }"
    first = execute(schema, query, context=context)
    second = execute(schema, query, context=context)
    assert first.data == second.data
    assert first.errors.messages == second.errors.messages


def test_concurrent_requests_share_schema(schema, store):
    results = {}

    def worker(book_id):
        ctx = ExecutionContext(services={"books": store})
        results[book_id] = execute(schema, f"{{ book(id: {book_id}) {{ title }} }}", context=ctx)

    threads = [threading.Thread(target=worker, args=(i,)) for i in (1, 2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results[1].data == {"book": {"title": "Dune"}}
    assert results[2].data == {"book": {"title": "Emma"}}


def test_to_dict_shape(schema, context):
    ok = execute(schema, "{ hello }", context=context).to_dict()
    assert ok == {"data": {"hello": "world"}}
    failed = execute(schema, "{ nope }", context=context).to_dict()
    assert failed["data"] == {}
    assert failed["errors"] == [
        {"message": "Field 'nope' not found on type 'RootQuery'", "path": "nope", "code": codes.FIELD_NOT_FOUND}
    ]


def test_root_value_feeds_default_resolution():
    registry = SchemaRegistry()
    schema = registry.define_root_query([Field("name", String), Field("size", Int)])
    result = execute(schema, "{ name size }", root_value={"name": "root", "size": "3"})
    assert result.ok
    assert result.data == {"name": "root", "size": 3}


def test_constant_resolver_and_error_accessors():
    registry = SchemaRegistry()
    schema = registry.define_root_query(
        [Field("answer", Int, resolver=ConstantResolver(42)), Field("fails", String, resolver=_boom)]
    )
    result = execute(schema, "{ answer fails }")
    assert result.data == {"answer": 42}
    assert [d.code for d in result.error_list()] == [codes.RESOLVER_ERROR]
    assert result.error_messages() == ["Resolver for RootQuery.fails failed: backend unavailable"]


def _chain(depth):
    sel = Selection(name="name")
    for _ in range(depth):
        sel = Selection(name="next", selections=[sel])
    return Selection(name="node", selections=[sel])


@pytest.fixture
def cyclic_schema():
    node = {"name": "loop"}
    node["next"] = node
    registry = SchemaRegistry()
    registry.define_type("Node", [Field("name", String), Field("next", "Node")])
    return registry.define_root_query([Field("node", "Node", resolver=lambda ctx: node), Field("hello", String)])


def test_selection_depth_is_limited(cyclic_schema):
    result = execute(
        cyclic_schema,
        "{ hello node { name next { next { next { name } } } } }",
        root_value={"hello": "hi"},
        max_depth=3,
    )
    assert result.data == {"hello": "hi", "node": {"name": "loop", "next": {"next": {}}}}
    assert [e.code for e in result.errors] == [codes.SELECTION_INVALID]
    assert result.errors.errors()[0].path == "node.next.next.next"


def test_deep_parsed_request_on_cyclic_type_returns_result(cyclic_schema):
    request = parse_request("{ hello }")[0]
    request.selections.append(_chain(500))
    result = execute(cyclic_schema, request, root_value={"hello": "hi"})
    assert result.data["hello"] == "hi"
    assert [e.code for e in result.errors] == [codes.SELECTION_INVALID]


def test_deeply_nested_request_text_is_a_parse_error(cyclic_schema):
    result = execute(cyclic_schema, "{" + "node{" * 1500 + "name" + "}" * 1501)
    assert result.data == {}
    assert [e.code for e in result.errors] == [codes.REQUEST_PARSE_ERROR]
