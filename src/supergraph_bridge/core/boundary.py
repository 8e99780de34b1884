"""The single ``compose`` call an artifact exposes to its host.

Nothing raised inside composition may cross the boundary: the host only ever
receives a plain output record.
"""

from collections.abc import Callable, Mapping
from typing import Any

from graphql import parse

from supergraph_bridge.core.invoke import SchemaParser, invoke_engine
from supergraph_bridge.core.ports.engine import CompositionEngine
from supergraph_bridge.core.sanitize import sanitize_errors, sanitize_hints

NON_ERROR_MESSAGE = "non-error thrown"

ComposeFunction = Callable[[Mapping[str, Any]], dict[str, Any]]


def error_message(error: Exception) -> str:
    message = getattr(error, "message", None)
    return message if isinstance(message, str) else str(error)


def create_compose(engine: CompositionEngine, parser: SchemaParser = parse) -> ComposeFunction:
    """Build the boundary ``compose`` function around one composition engine.

    The returned output always carries ``errors``; ``sdl`` is present when the
    engine produced a supergraph and ``hints`` when the engine emits hints.
    """

    def compose(request: Mapping[str, Any]) -> dict[str, Any]:
        try:
            result = invoke_engine(engine, request["services"], parser)
            output: dict[str, Any] = {}
            if result.supergraph_sdl is not None:
                output["sdl"] = result.supergraph_sdl
            if result.hints is not None:
                output["hints"] = sanitize_hints(result.hints)
            output["errors"] = sanitize_errors(result.errors)
            return output
        except Exception as error:
            return {"errors": [{"message": error_message(error)}]}
        except BaseException:  # noqa: BLE001
            return {"errors": [{"message": NON_ERROR_MESSAGE}]}

    return compose
