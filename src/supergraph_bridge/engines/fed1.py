"""Single-schema-merge engine: merged supergraph or errors, never hints."""

from supergraph_bridge.core.ports.engine import CompositionResult, ServiceDefinition
from supergraph_bridge.engines.merge import build_supergraph, merge_subgraphs

FEDERATION_DIRECTIVES: dict[str, str] = {
    "key": "directive @key(fields: String!) repeatable on OBJECT | INTERFACE",
    "external": "directive @external on FIELD_DEFINITION | OBJECT",
    "requires": "directive @requires(fields: String!) on FIELD_DEFINITION",
    "provides": "directive @provides(fields: String!) on FIELD_DEFINITION",
    "extends": "directive @extends on OBJECT | INTERFACE",
}


def compose_and_validate(definitions: list[ServiceDefinition]) -> CompositionResult:
    run = merge_subgraphs(definitions, FEDERATION_DIRECTIVES)
    if run.errors:
        return CompositionResult(errors=run.errors)
    sdl, errors = build_supergraph(run)
    return CompositionResult(supergraph_sdl=sdl, errors=errors or None)
