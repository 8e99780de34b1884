from collections.abc import Callable, Iterable, Mapping
from typing import Any

from graphql import DocumentNode, parse

from supergraph_bridge.core.ports.engine import CompositionEngine, CompositionResult, ServiceDefinition

SchemaParser = Callable[[str], DocumentNode]


def build_service_definitions(
    services: Iterable[Mapping[str, Any]],
    parser: SchemaParser = parse,
) -> list[ServiceDefinition]:
    """Parse every subgraph document and pair it with the subgraph's name and url.

    Duplicate names are passed through; detecting them is the engine's job.
    Parse errors propagate unchanged.
    """
    return [
        ServiceDefinition(name=service["name"], url=service.get("url"), type_defs=parser(service["sdl"]))
        for service in services
    ]


def invoke_engine(
    engine: CompositionEngine,
    services: Iterable[Mapping[str, Any]],
    parser: SchemaParser = parse,
) -> CompositionResult:
    return engine(build_service_definitions(services, parser))
