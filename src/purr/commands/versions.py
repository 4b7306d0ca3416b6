"""Versions command implementation."""

import click
from rich.console import Console

from purr.core.registry import RegistryClient

console = Console()


@click.command()
@click.argument("package_name")
def versions(package_name: str):
    """List the published versions of a package, newest first."""
    with RegistryClient.from_config() as client:
        available = client.get_versions(package_name)

    if not available:
        console.print(f"[yellow]No versions found for '{package_name}'[/yellow]")
        raise SystemExit(1)

    console.print(f"[bold]Available versions of {package_name}[/bold]")
    for i, version in enumerate(available):
        if i == 0:
            console.print(f"  [green]●[/green] {package_name}@{version} [dim](latest)[/dim]")
        else:
            console.print(f"  [dim]○[/dim] {package_name}@{version}")

    console.print(f"\n[dim]Install a specific version: purr install {package_name}@<version>[/dim]")
    console.print(f"[dim]Downgrade to a version:    purr downgrade {package_name}@<version>[/dim]")
