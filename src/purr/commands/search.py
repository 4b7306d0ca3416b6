"""Search command implementation."""

import click
from rich.console import Console
from rich.table import Table

from purr.core.registry import RegistryClient

console = Console()


@click.command()
@click.argument("query")
def search(query: str):
    """Search the registry for packages.

    QUERY is matched against package names, descriptions and keywords.
    """
    console.print(f"[blue]Searching for:[/blue] {query}\n")

    with RegistryClient.from_config() as client:
        results = client.search(query)

    if results is None or results.is_empty:
        console.print("[yellow]No packages found[/yellow]")
        raise SystemExit(0)

    console.print(f"[bold]Found {results.package_count} packages[/bold]")

    if not results.package_details:
        for name in results.packages:
            console.print(f"  • [cyan]{name}[/cyan]")
        raise SystemExit(0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Authors")
    table.add_column("Description")

    for package in results.package_details:
        desc = package.description or ""
        if len(desc) > 60:
            desc = desc[:57] + "..."
        table.add_row(
            package.name,
            package.version,
            ", ".join(package.authors),
            desc,
        )

    console.print(table)
    console.print("\n[dim]Install with: purr install <name>[/dim]")
