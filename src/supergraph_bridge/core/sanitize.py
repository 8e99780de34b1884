"""Rewrite composition-engine diagnostics into plain, cycle-free records.

Engine errors, hints and AST-node references are class instances that point
back into the engine's object graph (parsed documents, token lists, sources),
so they cannot cross the sandbox boundary as they are. Each kind gets its own
projection that names the fields it keeps:

- nodes keep ``kind``, ``name``, ``subgraph`` and ``loc`` and nothing else;
- errors keep their own plain fields, with ``errors`` and ``nodes`` rewritten
  recursively and ``source`` / ``stack`` removed;
- hints keep their own plain fields, with ``nodes`` rewritten.

Fields whose value is ``None`` are omitted, as are pass-through fields that are
not plain data (primitives, or lists and mappings of them). Pass-through data
is copied with a depth limit and an item budget, and a container that refers
back to itself is dropped at the point of the cycle.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

_NODE_FIELDS = ("kind", "name", "subgraph", "loc")
_DROPPED_ERROR_FIELDS = frozenset({"source", "stack"})
_REWRITTEN_FIELDS = frozenset({"errors", "nodes"})
_PRIMITIVES = (str, int, float, bool)

# Pass-through containers deeper than this are treated as opaque.
_MAX_PLAIN_DEPTH = 16
# Upper bound on the values copied out of one pass-through field.
_MAX_PLAIN_ITEMS = 10_000

_OPAQUE = object()


def _read(obj: Any, field: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(field)
    return getattr(obj, field, None)


def _own_fields(obj: Any) -> dict[str, Any]:
    """Return the public instance fields of ``obj``, from ``__slots__`` and ``__dict__``."""
    if isinstance(obj, Mapping):
        return {str(key): value for key, value in obj.items()}

    fields: dict[str, Any] = {}
    for cls in reversed(type(obj).__mro__):
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot.startswith("_") or slot in fields:
                continue
            try:
                fields[slot] = getattr(obj, slot)
            except AttributeError:
                continue
    for key, value in getattr(obj, "__dict__", {}).items():
        if not key.startswith("_"):
            fields[key] = value
    return fields


class _PlainCopy:
    """Plain-data copy of one pass-through field value.

    A container already on the current path is opaque, and once the item
    budget is spent every further value is opaque as well.
    """

    def __init__(self, budget: int = _MAX_PLAIN_ITEMS) -> None:
        self.remaining = budget
        self.active: set[int] = set()

    def convert(self, value: Any, depth: int = 0) -> Any:
        if self.remaining <= 0:
            return _OPAQUE
        self.remaining -= 1
        if value is None or isinstance(value, _PRIMITIVES):
            return value
        if not isinstance(value, Mapping | list | tuple):
            return _OPAQUE
        container = id(value)
        if depth >= _MAX_PLAIN_DEPTH or container in self.active:
            return _OPAQUE

        self.active.add(container)
        try:
            return self._convert_container(value, depth)
        finally:
            self.active.discard(container)

    def _convert_container(self, value: Any, depth: int) -> Any:
        if isinstance(value, tuple) and hasattr(value, "_asdict"):
            value = value._asdict()
        if isinstance(value, Mapping):
            record = {}
            for key, item in value.items():
                converted = self.convert(item, depth + 1)
                if isinstance(key, str) and converted is not _OPAQUE:
                    record[key] = converted
            return record
        items = (self.convert(item, depth + 1) for item in value)
        return [converted for converted in items if converted is not _OPAQUE]


def _copy_plain_fields(obj: Any, excluded: frozenset[str]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for key, value in _own_fields(obj).items():
        if key in excluded:
            continue
        converted = _PlainCopy().convert(value)
        if converted is not None and converted is not _OPAQUE:
            record[key] = converted
    return record


def _offsets(loc: Any) -> list[int] | None:
    if loc is None:
        return None
    if isinstance(loc, list | tuple):
        start, end = loc if len(loc) == 2 else (None, None)
    else:
        start, end = _read(loc, "start"), _read(loc, "end")
    if isinstance(start, int) and isinstance(end, int):
        return [start, end]
    return None


def sanitize_node(node: Any) -> dict[str, Any]:
    """Project an AST-node reference onto ``{kind, name, subgraph, loc}``.

    ``name`` is the inner text of the node's name node; ``loc`` is the
    ``[start, end]`` offset pair of its location. Already-sanitized nodes come
    back unchanged.
    """
    name = _read(node, "name")
    if name is not None and not isinstance(name, str):
        name = _read(name, "value")

    values = (_read(node, "kind"), name, _read(node, "subgraph"), _offsets(_read(node, "loc")))
    return {field: value for field, value in zip(_NODE_FIELDS, values) if value is not None}


def sanitize_nodes(nodes: Iterable[Any]) -> list[dict[str, Any]]:
    return [sanitize_node(node) for node in nodes]


def sanitize_error(error: Any) -> dict[str, Any]:
    """Rewrite one engine error, and the errors nested in it, into a plain record."""
    record = _copy_plain_fields(error, _DROPPED_ERROR_FIELDS | _REWRITTEN_FIELDS)
    if "message" not in record and isinstance(error, BaseException):
        record["message"] = str(error)

    nested = _read(error, "errors")
    if nested is not None:
        record["errors"] = [sanitize_error(inner) for inner in nested]
    nodes = _read(error, "nodes")
    if nodes is not None:
        record["nodes"] = sanitize_nodes(nodes)
    return record


def sanitize_hint(hint: Any) -> dict[str, Any]:
    record = _copy_plain_fields(hint, frozenset({"nodes"}))
    nodes = _read(hint, "nodes")
    if nodes is not None:
        record["nodes"] = sanitize_nodes(nodes)
    return record


def sanitize_errors(errors: Iterable[Any] | None) -> list[dict[str, Any]]:
    return [sanitize_error(error) for error in errors or ()]


def sanitize_hints(hints: Iterable[Any] | None) -> list[dict[str, Any]]:
    return [sanitize_hint(hint) for hint in hints or ()]
