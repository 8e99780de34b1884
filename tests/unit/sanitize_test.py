"""Unit tests for the projection of engine diagnostics onto plain records."""

from __future__ import annotations

import json
from typing import Any, NamedTuple

from graphql import GraphQLError, parse

from supergraph_bridge.core.sanitize import (
    _MAX_PLAIN_ITEMS,
    sanitize_error,
    sanitize_errors,
    sanitize_hint,
    sanitize_hints,
    sanitize_node,
)


class _Name:
    def __init__(self, value: str) -> None:
        self.value = value


class _Loc:
    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        self.owner: Any = None


class _Node:
    def __init__(self, kind: str, name: str | None = None, loc: _Loc | None = None, subgraph: str | None = None):
        self.kind = kind
        self.name = _Name(name) if name else None
        self.loc = loc
        self.subgraph = subgraph
        self.parent: _Node | None = None
        self.children: list[_Node] = []
        if loc is not None:
            loc.owner = self


class _EngineError(Exception):
    def __init__(self, message: str, **fields: Any) -> None:
        super().__init__(message)
        self.message = message
        for key, value in fields.items():
            setattr(self, key, value)


class _Position(NamedTuple):
    line: int
    column: int


def _cyclic_tree() -> _Node:
    parent = _Node("object_type_definition", "User", _Loc(0, 40), "users")
    child = _Node("field_definition", "id", _Loc(20, 26), "users")
    parent.children.append(child)
    child.parent = parent
    return child


def _count_values(value: Any) -> int:
    if isinstance(value, dict):
        return 1 + sum(_count_values(item) for item in value.values())
    if isinstance(value, list):
        return 1 + sum(_count_values(item) for item in value)
    return 1


def _all_keys(value: Any) -> set[str]:
    keys: set[str] = set()
    if isinstance(value, dict):
        for key, item in value.items():
            keys.add(key)
            keys |= _all_keys(item)
    elif isinstance(value, list):
        for item in value:
            keys |= _all_keys(item)
    return keys


class TestSanitizeNode:
    def test_keeps_only_allow_listed_fields(self) -> None:
        node = _cyclic_tree()
        assert sanitize_node(node) == {"kind": "field_definition", "name": "id", "subgraph": "users", "loc": [20, 26]}

    def test_omits_missing_name_and_location(self) -> None:
        assert sanitize_node(_Node("directive")) == {"kind": "directive"}

    def test_is_idempotent_on_its_output(self) -> None:
        once = sanitize_node(_cyclic_tree())
        assert sanitize_node(once) == once

    def test_cyclic_node_graph_serializes(self) -> None:
        node = _cyclic_tree()
        assert node.parent is not None
        node.parent.parent = node
        json.dumps(sanitize_node(node.parent))

    def test_graphql_core_node(self) -> None:
        definition = parse("type Query { x: Int }").definitions[0]
        assert sanitize_node(definition) == {"kind": "object_type_definition", "name": "Query", "loc": [0, 21]}

    def test_subgraph_passes_through_untouched(self) -> None:
        node = _Node("field_definition", "id", subgraph="reviews")
        assert sanitize_node(node)["subgraph"] == "reviews"

    def test_location_without_offsets_is_omitted(self) -> None:
        node = _Node("field_definition", "id")
        node.loc = object()  # type: ignore[assignment]
        assert sanitize_node(node) == {"kind": "field_definition", "name": "id"}

    def test_malformed_offset_pair_is_omitted(self) -> None:
        assert sanitize_node({"kind": "field_definition", "loc": [3]}) == {"kind": "field_definition"}
        assert sanitize_node({"kind": "field_definition", "loc": [3, None]}) == {"kind": "field_definition"}


class TestSanitizeError:
    def test_drops_source_and_stack(self) -> None:
        error = _EngineError("boom", source=object(), stack="Traceback ...")
        record = sanitize_error(error)
        assert record == {"message": "boom"}

    def test_copies_plain_fields_verbatim(self) -> None:
        error = _EngineError("boom", code="FIELD_TYPE_MISMATCH", extensions={"code": "X", "count": 2})
        record = sanitize_error(error)
        assert record["code"] == "FIELD_TYPE_MISMATCH"
        assert record["extensions"] == {"code": "X", "count": 2}

    def test_omits_none_and_opaque_fields(self) -> None:
        error = _EngineError("boom", path=None, schema=object())
        assert sanitize_error(error) == {"message": "boom"}

    def test_falls_back_to_str_for_message(self) -> None:
        assert sanitize_error(ValueError("bad input")) == {"message": "bad input"}

    def test_rewrites_nested_errors_and_nodes(self) -> None:
        inner = _EngineError("inner", nodes=[_cyclic_tree()], stack="inner stack")
        outer = _EngineError("outer", errors=[inner], source="type Query { x: Int }")

        record = sanitize_error(outer)

        assert record["message"] == "outer"
        assert record["errors"] == [
            {
                "message": "inner",
                "nodes": [{"kind": "field_definition", "name": "id", "subgraph": "users", "loc": [20, 26]}],
            }
        ]

    def test_never_exposes_stack_or_source_at_any_depth(self) -> None:
        leaf = _EngineError("leaf", source="s", stack="t")
        middle = _EngineError("middle", errors=[leaf], source="s", stack="t")
        record = sanitize_error(_EngineError("top", errors=[middle], source="s", stack="t"))
        keys = _all_keys(record)
        assert "source" not in keys
        assert "stack" not in keys

    def test_named_tuples_become_records(self) -> None:
        error = _EngineError("boom", locations=[_Position(1, 14)])
        assert sanitize_error(error)["locations"] == [{"line": 1, "column": 14}]

    def test_cyclic_pass_through_mapping_terminates(self) -> None:
        details: dict[str, Any] = {"level": "warn"}
        details["self"] = details
        record = sanitize_error(_EngineError("boom", details=details))
        assert record["details"]["level"] == "warn"
        json.dumps(record)

    def test_mapping_referring_to_itself_through_several_keys(self) -> None:
        details: dict[str, Any] = {"level": "warn"}
        details["a"] = details
        details["b"] = details
        details["c"] = details

        record = sanitize_error(_EngineError("boom", details=details, code="X"))

        assert record == {"message": "boom", "details": {"level": "warn"}, "code": "X"}

    def test_shared_subtrees_are_copied_within_a_bounded_budget(self) -> None:
        level: dict[str, Any] = {"leaf": 1}
        for _ in range(20):
            level = {"a": level, "b": level, "c": level}

        record = sanitize_error(_EngineError("boom", details=level, code="X"))

        assert record["message"] == "boom"
        assert record["code"] == "X"
        assert _count_values(record["details"]) <= _MAX_PLAIN_ITEMS
        json.dumps(record)

    def test_graphql_error_becomes_plain_data(self) -> None:
        document = parse("type Query { x: Int }")
        field = document.definitions[0].fields[0]  # type: ignore[attr-defined]
        error = GraphQLError("Cannot use x", nodes=[field], extensions={"code": "BAD_FIELD"})

        record = sanitize_error(error)

        assert record["message"] == "Cannot use x"
        assert record["nodes"] == [{"kind": "field_definition", "name": "x", "loc": [13, 19]}]
        assert record["locations"] == [{"line": 1, "column": 14}]
        assert record["extensions"] == {"code": "BAD_FIELD"}
        assert "source" not in record
        json.dumps(record)

    def test_is_idempotent_on_its_output(self) -> None:
        error = _EngineError("outer", errors=[_EngineError("inner", nodes=[_cyclic_tree()])], code="X")
        once = sanitize_error(error)
        assert sanitize_error(once) == once

    def test_sanitize_errors_accepts_missing_list(self) -> None:
        assert sanitize_errors(None) == []


class _Hint:
    def __init__(self, code: str, message: str, nodes: list[Any] | None, run: Any) -> None:
        self.code = code
        self.message = message
        self.nodes = nodes
        self.composition = run


class TestSanitizeHint:
    def test_rewrites_nodes_and_drops_back_references(self) -> None:
        run: dict[str, Any] = {}
        hint = _Hint("INCONSISTENT_FIELDS", "Field is missing", [_cyclic_tree()], object())
        run["hints"] = [hint]

        record = sanitize_hint(hint)

        assert record == {
            "code": "INCONSISTENT_FIELDS",
            "message": "Field is missing",
            "nodes": [{"kind": "field_definition", "name": "id", "subgraph": "users", "loc": [20, 26]}],
        }

    def test_hint_without_nodes(self) -> None:
        assert sanitize_hint(_Hint("CODE", "msg", None, None)) == {"code": "CODE", "message": "msg"}

    def test_sanitize_hints_preserves_order(self) -> None:
        hints = [_Hint("A", "first", None, None), _Hint("B", "second", None, None)]
        assert [h["code"] for h in sanitize_hints(hints)] == ["A", "B"]
