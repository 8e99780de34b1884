import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from supergraph_bridge.cli.compose import bench, compose
from supergraph_bridge.cli.versions import versions

app = typer.Typer(
    name="supergraph-bridge",
    help="Supergraph Bridge CLI: compose GraphQL subgraphs in a sandboxed worker.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("compose")(compose)
app.command("bench")(bench)
app.command("versions")(versions)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log sandbox activity.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def main() -> None:
    app()
