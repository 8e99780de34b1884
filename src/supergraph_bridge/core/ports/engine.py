from dataclasses import dataclass
from typing import Any, Protocol

from graphql import DocumentNode


@dataclass
class ServiceDefinition:
    """One parsed subgraph, in the shape composition engines consume."""

    name: str
    type_defs: DocumentNode
    url: str | None = None


@dataclass
class CompositionResult:
    """Raw engine output. Errors and hints are live engine objects, not plain data."""

    supergraph_sdl: str | None = None
    errors: list[Any] | None = None
    hints: list[Any] | None = None


class CompositionEngine(Protocol):
    def __call__(self, definitions: list[ServiceDefinition]) -> CompositionResult: ...
