"""Info command implementation."""

import click
from rich.console import Console
from rich.panel import Panel

from purr.core.config import get_config
from purr.core.manifest import Manifest
from purr.core.registry import RegistryClient

console = Console()


def _join(values: list[str]) -> str:
    return ", ".join(values) if values else "None"


@click.command()
@click.argument("package_name")
@click.option("--version", "version", help="Show a specific version")
def info(package_name: str, version: str | None):
    """Show registry information about a package."""
    with RegistryClient.from_config() as client:
        package = client.get_package(package_name, version)

    if package is None:
        console.print(f"[red]Error:[/red] Package '{package_name}' not found")
        raise SystemExit(1)

    lines = [
        f"[bold]Name:[/bold] {package.name}",
        f"[bold]Version:[/bold] {package.version}",
        f"[bold]Authors:[/bold] {_join(package.authors)}",
        f"[bold]Homepage:[/bold] {package.homepage}",
        f"[bold]Issue Tracker:[/bold] {package.issue_tracker}",
        f"[bold]Git:[/bold] {package.git}",
        f"[bold]Installer:[/bold] {package.installer or '(release assets)'}",
        f"[bold]Dependencies:[/bold] {_join(package.dependencies)}",
        f"[bold]Categories:[/bold] {_join(package.categories)}",
    ]
    if package.main_file:
        lines.append(f"[bold]Main file:[/bold] {package.main_file}")
    if package.description:
        lines.insert(1, f"[bold]Description:[/bold] {package.description}")

    installed = Manifest(get_config().manifest_path).get(package.name)
    title = f"[green]{package.name}[/green]"
    if installed:
        title += f" (installed {installed.version})"

    console.print(Panel("\n".join(lines), title=title))
