import asyncio
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from supergraph_bridge.host import SandboxError
from supergraph_bridge.host import compose as _compose
from supergraph_bridge.models import CompositionReport, SanitizedError, SanitizedNode, SubgraphInput
from supergraph_bridge.versions import VERSIONS

console = Console()


def parse_service_arg(arg: str) -> SubgraphInput:
    """Turn ``NAME:PATH[:URL]`` into a subgraph, reading the schema from PATH."""
    name, _, rest = arg.partition(":")
    path, _, url = rest.partition(":")
    if not name or not path:
        raise ValueError(f"Expected NAME:PATH[:URL], got '{arg}'")
    try:
        sdl = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    return SubgraphInput(name=name, sdl=sdl, url=url or None)


def _describe_node(node: SanitizedNode) -> str:
    parts = [node.kind or "node"]
    if node.name:
        parts.append(node.name)
    if node.subgraph:
        parts.append(f"in {node.subgraph}")
    if node.loc:
        parts.append(f"[{node.loc[0]}, {node.loc[1]}]")
    return " ".join(parts)


def _render_error(error: SanitizedError, depth: int = 0) -> None:
    pad = "  " * depth
    extensions = (error.model_extra or {}).get("extensions")
    code = extensions.get("code") if isinstance(extensions, dict) else None
    label = f"[red]error[/red] ({escape(str(code))})" if code else "[red]error[/red]"
    console.print(f"{pad}{label} {escape(error.message)}")
    for node in error.nodes or []:
        console.print(f"{pad}  at {escape(_describe_node(node))}")
    for inner in error.errors or []:
        _render_error(inner, depth + 1)


def _render_report(report: CompositionReport) -> None:
    if report.errors:
        for error in report.errors:
            _render_error(error)
        raise typer.Exit(1)

    for hint in report.hints or []:
        label = f"[yellow]hint[/yellow] ({escape(hint.code)})" if hint.code else "[yellow]hint[/yellow]"
        console.print(f"{label} {escape(hint.message or '')}")

    if report.sdl is not None:
        console.print("[green]Supergraph SDL:[/green]")
        console.print(report.sdl, markup=False, highlight=False)


def compose(
    version: Annotated[str, typer.Argument(help="Composition version (e.g. 1, 2, 2.3, fed2).")],
    services: Annotated[list[str], typer.Argument(help="Subgraphs as NAME:PATH[:URL].")],
    raw: Annotated[bool, typer.Option(help="Print the raw JSON response.")] = False,
    timeout: Annotated[float | None, typer.Option(help="Seconds to wait for the sandbox.")] = None,
) -> None:
    """Compose subgraph schema files into a supergraph."""
    try:
        subgraphs = [parse_service_arg(arg) for arg in services]
        report, raw_response = asyncio.run(_compose(version, subgraphs, timeout=timeout))
    except (ValueError, OSError, SandboxError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    if raw:
        console.print("Raw response:", raw_response, markup=False, highlight=False)
    _render_report(report)


def bench(
    paths: Annotated[list[Path], typer.Argument(help="Subgraph schema files; each file name is its subgraph name.")],
) -> None:
    """Compose the same subgraphs with every version and time each run."""
    try:
        services = [SubgraphInput(name=str(path), sdl=path.read_text(encoding="utf-8")) for path in paths]
    except OSError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    async def _run() -> None:
        for version in VERSIONS:
            started = time.perf_counter()
            try:
                _, raw_response = await _compose(version.name, services)
            except SandboxError as exc:
                console.print(f"[red]{version.name}: {escape(str(exc))}[/red]")
                continue
            elapsed = time.perf_counter() - started
            console.print(f"({elapsed:.3f}s) {version.name}: {raw_response.strip()}", markup=False, highlight=False)

    asyncio.run(_run())
