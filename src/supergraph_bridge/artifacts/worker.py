"""Process entry for artifacts: one JSON request on stdin, one JSON response on stdout."""

import json
import sys
from typing import TextIO

from supergraph_bridge.core.boundary import ComposeFunction
from supergraph_bridge.core.registry import get_entry_point, register_entry_point


def serve(stdin: TextIO, stdout: TextIO) -> None:
    compose = get_entry_point()
    request = json.loads(stdin.read())
    json.dump(compose(request), stdout)
    stdout.write("\n")
    stdout.flush()


def run(compose: ComposeFunction, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
    register_entry_point(compose)
    serve(stdin or sys.stdin, stdout or sys.stdout)
