"""Uninstall command implementation."""

import click
from rich.console import Console

from purr.core.config import get_config
from purr.core.manager import InstallError, PackageManager

console = Console()


@click.command()
@click.argument("package_name")
def uninstall(package_name: str):
    """Uninstall a package.

    Removes the package's clone (running its uninstall script when it has
    one) and any binaries it placed in the purr bin directory.
    """
    config = get_config()
    console.print(f"[blue]Uninstalling[/blue] {package_name}...")

    with PackageManager(config=config, console=console) as manager:
        try:
            removed = manager.uninstall(package_name)
        except InstallError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    if not removed:
        raise SystemExit(1)
