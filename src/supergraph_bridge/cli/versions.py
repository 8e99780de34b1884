from rich.console import Console
from rich.table import Table

from supergraph_bridge.versions import VERSIONS

console = Console()


def versions() -> None:
    """List the composition versions and the artifact behind each."""
    table = Table(show_lines=False)
    for header in ("version", "artifact", "description"):
        table.add_column(header)
    for version in VERSIONS:
        table.add_row(version.name, version.artifact, version.description)
    console.print(table)
