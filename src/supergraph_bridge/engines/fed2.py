"""Hint-emitting engine.

Composes like the single-schema-merge engine and additionally reports
non-fatal hints about subgraphs that agree on types but not on their details.
"""

from typing import Any

from supergraph_bridge.core.ports.engine import CompositionResult, ServiceDefinition
from supergraph_bridge.engines.fed1 import FEDERATION_DIRECTIVES as FED1_DIRECTIVES
from supergraph_bridge.engines.merge import (
    ROOT_TYPE_NAMES,
    MergedType,
    MergeRun,
    build_supergraph,
    in_subgraphs,
    merge_subgraphs,
)

FEDERATION_DIRECTIVES: dict[str, str] = {
    **FED1_DIRECTIVES,
    "shareable": "directive @shareable repeatable on OBJECT | FIELD_DEFINITION",
    "inaccessible": (
        "directive @inaccessible on FIELD_DEFINITION | OBJECT | INTERFACE | UNION | ARGUMENT_DEFINITION"
        " | SCALAR | ENUM | ENUM_VALUE | INPUT_OBJECT | INPUT_FIELD_DEFINITION"
    ),
    "override": "directive @override(from: String!) on FIELD_DEFINITION",
}


class CompositionHint:
    """A non-fatal observation made while composing.

    ``composition`` points back at the merge run that produced the hint.
    """

    def __init__(self, code: str, message: str, nodes: list[Any], composition: MergeRun) -> None:
        self.code = code
        self.message = message
        self.nodes = nodes
        self.composition = composition

    def __repr__(self) -> str:
        return f"CompositionHint({self.code!r}, {self.message!r})"


def _description_hint(run: MergeRun, merged: MergedType) -> CompositionHint | None:
    described = [c for c in merged.contributions if getattr(c.node, "description", None) is not None]
    if len({c.node.description.value for c in described}) < 2:
        return None
    return CompositionHint(
        "INCONSISTENT_DESCRIPTION",
        f'Type "{merged.name}" has inconsistent descriptions across subgraphs; '
        f"the supergraph uses the description from {in_subgraphs([described[0].subgraph])}",
        [c.reference() for c in described],
        run,
    )


def _field_hints(run: MergeRun, merged: MergedType) -> list[CompositionHint]:
    if merged.keyword != "type" or merged.name in ROOT_TYPE_NAMES:
        return []
    subgraphs = merged.subgraphs
    if len(subgraphs) < 2:
        return []

    hints = []
    for field_name, contributions in merged.fields.items():
        defining = list(dict.fromkeys(c.subgraph for c in contributions))
        missing = [s for s in subgraphs if s not in defining]
        if not missing:
            continue
        hints.append(
            CompositionHint(
                "INCONSISTENT_FIELDS",
                f'Field "{merged.name}.{field_name}" is defined in {in_subgraphs(defining)} '
                f"but not in {in_subgraphs(missing)}",
                [c.reference() for c in contributions],
                run,
            )
        )
    return hints


def collect_hints(run: MergeRun) -> list[CompositionHint]:
    hints: list[CompositionHint] = []
    for merged in run.types.values():
        hint = _description_hint(run, merged)
        if hint is not None:
            hints.append(hint)
        hints.extend(_field_hints(run, merged))
    return hints


def compose_services(definitions: list[ServiceDefinition]) -> CompositionResult:
    run = merge_subgraphs(definitions, FEDERATION_DIRECTIVES)
    if run.errors:
        return CompositionResult(errors=run.errors, hints=[])
    hints = collect_hints(run)
    sdl, errors = build_supergraph(run)
    if errors:
        return CompositionResult(errors=errors, hints=[])
    return CompositionResult(supergraph_sdl=sdl, errors=[], hints=hints)
