"""Stats command implementation."""

import click
from rich.console import Console

from purr.core.registry import RegistryClient

console = Console()


@click.command()
def stats():
    """Show registry statistics."""
    with RegistryClient.from_config() as client:
        statistics = client.get_statistics()

    if statistics is None:
        console.print("[red]Error:[/red] Could not retrieve statistics")
        raise SystemExit(1)

    console.print("[bold]Repository Statistics[/bold]")
    console.print(f"  Total packages:  {statistics.total_packages:,}")
    console.print(f"  Active packages: {statistics.active_packages:,}")
    console.print(f"  Total downloads: {statistics.total_downloads:,}")
    console.print(f"  Total views:     {statistics.total_views:,}")

    if statistics.popular_authors:
        console.print(f"  Popular authors: {', '.join(statistics.popular_authors)}")

    if statistics.most_downloaded:
        console.print("\n[yellow]Most downloaded:[/yellow]")
        for package in statistics.most_downloaded[:5]:
            console.print(f"  • [cyan]{package.name}[/cyan] [dim]({package.downloads:,} downloads)[/dim]")

    if statistics.recently_added:
        console.print("\n[green]Recently added:[/green]")
        for package in statistics.recently_added[:5]:
            console.print(f"  • [cyan]{package.name}[/cyan] {package.version}")

    if statistics.last_updated:
        console.print(f"\n[dim]Last updated: {statistics.last_updated}[/dim]")
