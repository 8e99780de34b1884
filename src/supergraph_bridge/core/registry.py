"""Process-wide registration of an artifact's ``compose`` entry point.

An artifact registers exactly one function when it starts; the binding is
never reassigned afterwards.
"""

from supergraph_bridge.core.boundary import ComposeFunction

_entry_point: ComposeFunction | None = None


class EntryPointError(RuntimeError):
    """Raised on a second registration or a lookup before registration."""


def register_entry_point(compose: ComposeFunction) -> ComposeFunction:
    global _entry_point  # noqa: PLW0603
    if _entry_point is not None and _entry_point is not compose:
        raise EntryPointError("A compose entry point is already registered in this process.")
    _entry_point = compose
    return compose


def get_entry_point() -> ComposeFunction:
    if _entry_point is None:
        raise EntryPointError("No compose entry point has been registered.")
    return _entry_point
