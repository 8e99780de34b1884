"""Field-level merge of subgraph documents, shared by both reference engines.

Object, interface and input-object types are merged field by field across
subgraphs; every other definition keeps its first occurrence. The merged
document is validated and printed with graphql-core.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Any

from graphql import (
    DirectiveDefinitionNode,
    DirectiveNode,
    DocumentNode,
    GraphQLError,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    Node,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    Visitor,
    TypeDefinitionNode,
    build_ast_schema,
    parse,
    print_ast,
    print_schema,
    validate_schema,
    visit,
)
from graphql.validation.validate import validate_sdl

from supergraph_bridge.core.ports.engine import ServiceDefinition

_TYPE_KEYWORDS: dict[type[Node], str] = {
    ObjectTypeDefinitionNode: "type",
    ObjectTypeExtensionNode: "type",
    InterfaceTypeDefinitionNode: "interface",
    InterfaceTypeExtensionNode: "interface",
    InputObjectTypeDefinitionNode: "input",
    InputObjectTypeExtensionNode: "input",
}

ROOT_TYPE_NAMES = frozenset({"Query", "Mutation", "Subscription"})


class SubgraphASTNode:
    """Reference to an AST node of one subgraph.

    Attribute reads fall through to the wrapped node, so the reference can be
    used wherever graphql-core expects a node.
    """

    __slots__ = ("node", "subgraph")

    def __init__(self, node: Node, subgraph: str) -> None:
        self.node = node
        self.subgraph = subgraph

    def __getattr__(self, name: str) -> Any:
        return getattr(self.node, name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.node.kind} in {self.subgraph!r}>"


class CompositionError(GraphQLError):
    """Composition failure carrying an error code and, optionally, the errors that caused it."""

    def __init__(
        self,
        message: str,
        code: str,
        nodes: list[Any] | None = None,
        causes: list[GraphQLError] | None = None,
    ) -> None:
        super().__init__(message, nodes=nodes, extensions={"code": code})
        self.code = code
        self.errors = list(causes) if causes else None


@dataclass
class Contribution:
    subgraph: str
    node: Node

    def reference(self) -> SubgraphASTNode:
        return SubgraphASTNode(self.node, self.subgraph)


@dataclass
class MergedType:
    name: str
    keyword: str
    contributions: list[Contribution] = field(default_factory=list)
    fields: dict[str, list[Contribution]] = field(default_factory=dict)
    interfaces: list[str] = field(default_factory=list)

    @property
    def subgraphs(self) -> list[str]:
        return list(dict.fromkeys(c.subgraph for c in self.contributions))

    def description(self) -> Contribution | None:
        for contribution in self.contributions:
            if getattr(contribution.node, "description", None) is not None:
                return contribution
        return None


@dataclass
class MergeRun:
    """State of one merge: the merged types, other definitions and the errors found."""

    directive_prelude: dict[str, str]
    types: dict[str, MergedType] = field(default_factory=dict)
    other_definitions: dict[str, str] = field(default_factory=dict)
    declared_directives: set[str] = field(default_factory=set)
    errors: list[GraphQLError] = field(default_factory=list)


def in_subgraphs(names: list[str]) -> str:
    quoted = [f'"{name}"' for name in names]
    if len(quoted) == 1:
        return f"subgraph {quoted[0]}"
    return f"subgraphs {', '.join(quoted[:-1])} and {quoted[-1]}"


def _add_type(run: MergeRun, subgraph: str, node: Node, keyword: str) -> None:
    name = node.name.value
    merged = run.types.get(name)
    if merged is None:
        merged = run.types[name] = MergedType(name=name, keyword=keyword)
    elif merged.keyword != keyword:
        first = merged.contributions[0]
        run.errors.append(
            CompositionError(
                f'Type "{name}" has mismatched kind: it is defined as "{merged.keyword}" '
                f'in {in_subgraphs([first.subgraph])} but "{keyword}" in {in_subgraphs([subgraph])}',
                code="TYPE_KIND_MISMATCH",
                nodes=[first.reference(), SubgraphASTNode(node, subgraph)],
            )
        )
        return

    merged.contributions.append(Contribution(subgraph, node))
    for interface in getattr(node, "interfaces", None) or ():
        if interface.name.value not in merged.interfaces:
            merged.interfaces.append(interface.name.value)
    for field_node in node.fields or ():
        merged.fields.setdefault(field_node.name.value, []).append(Contribution(subgraph, field_node))


def _check_field_types(run: MergeRun) -> None:
    for merged in run.types.values():
        for field_name, contributions in merged.fields.items():
            by_type: dict[str, list[str]] = {}
            for contribution in contributions:
                printed = print_ast(contribution.node.type)
                by_type.setdefault(printed, []).append(contribution.subgraph)
            if len(by_type) < 2:
                continue
            (first_type, first_subgraphs), *others = by_type.items()
            mismatches = " and ".join(f'type "{t}" in {in_subgraphs(s)}' for t, s in others)
            run.errors.append(
                CompositionError(
                    f'Type of field "{merged.name}.{field_name}" is incompatible across subgraphs: '
                    f'it has type "{first_type}" in {in_subgraphs(first_subgraphs)} but {mismatches}',
                    code="FIELD_TYPE_MISMATCH",
                    nodes=[c.reference() for c in contributions],
                )
            )


def _definition_key(node: Node) -> str:
    if isinstance(node, DirectiveDefinitionNode):
        return f"@{node.name.value}"
    if isinstance(node, TypeDefinitionNode):
        return node.name.value
    return print_ast(node)


def merge_subgraphs(definitions: list[ServiceDefinition], directive_prelude: dict[str, str]) -> MergeRun:
    run = MergeRun(directive_prelude=directive_prelude)
    if not definitions:
        run.errors.append(CompositionError("No subgraphs to compose", code="NO_SUBGRAPHS"))
        return run

    for definition in definitions:
        for node in definition.type_defs.definitions:
            keyword = _TYPE_KEYWORDS.get(type(node))
            if keyword is not None:
                _add_type(run, definition.name, node, keyword)
                continue
            if isinstance(node, DirectiveDefinitionNode):
                run.declared_directives.add(node.name.value)
            run.other_definitions.setdefault(_definition_key(node), print_ast(node))

    _check_field_types(run)
    return run


def _print_type(merged: MergedType) -> str:
    header = f"{merged.keyword} {merged.name}"
    if merged.interfaces:
        header += " implements " + " & ".join(merged.interfaces)
    described = merged.description()
    if described is not None:
        header = print_ast(described.node.description) + "\n" + header
    if not merged.fields:
        return header
    body = "\n".join(textwrap.indent(print_ast(contributions[0].node), "  ") for contributions in merged.fields.values())
    return f"{header} {{\n{body}\n}}"


class _DirectiveUsage(Visitor):
    def __init__(self) -> None:
        super().__init__()
        self.names: set[str] = set()

    def enter_directive(self, node: DirectiveNode, *_args: Any) -> None:
        self.names.add(node.name.value)


def _used_directives(document: DocumentNode) -> set[str]:
    usage = _DirectiveUsage()
    visit(document, usage)
    return usage.names


def _invalid_supergraph(causes: list[GraphQLError]) -> CompositionError:
    return CompositionError(
        "The composed supergraph is not a valid schema",
        code="INVALID_SUPERGRAPH",
        causes=causes,
    )


def build_supergraph(run: MergeRun) -> tuple[str | None, list[GraphQLError]]:
    """Print, validate and build the merged document. Returns ``(sdl, errors)``."""
    body = "\n\n".join([*(_print_type(merged) for merged in run.types.values()), *run.other_definitions.values()])
    used = _used_directives(parse(body))
    prelude = [
        definition
        for name, definition in run.directive_prelude.items()
        if name in used and name not in run.declared_directives
    ]
    document = parse("\n\n".join([*prelude, body]))

    sdl_errors = validate_sdl(document)
    if sdl_errors:
        return None, [_invalid_supergraph(list(sdl_errors))]

    schema = build_ast_schema(document, assume_valid_sdl=True)
    schema_errors = validate_schema(schema)
    if schema_errors:
        return None, [_invalid_supergraph(list(schema_errors))]
    return print_schema(schema), []
