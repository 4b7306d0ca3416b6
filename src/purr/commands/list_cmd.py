"""List command implementation."""

import click
from rich.console import Console
from rich.table import Table

from purr.core.config import get_config
from purr.core.extractor import is_binary_installed
from purr.core.manifest import Manifest
from purr.core.platform import get_platform_info
from purr.core.registry import RegistryClient
from purr.core.source import read_sidecar
from purr.models.package import SHAPE_CLONE

console = Console()


def list_installed() -> None:
    """Show what is installed locally, from the manifest and the packages directory."""
    config = get_config()
    platform_info = get_platform_info()
    manifest = Manifest(config.manifest_path)
    rows = {}

    for pkg in manifest.list_packages():
        if pkg.shape == SHAPE_CLONE:
            present = (config.packages_dir / pkg.name).is_dir()
        else:
            present = is_binary_installed(pkg.name, config.bin_dir, platform_info)
        if present:
            rows[pkg.name] = (pkg.version, pkg.shape, pkg.installed_at.strftime("%Y-%m-%d %H:%M"))

    # Clone installs made before the manifest existed
    if config.packages_dir.is_dir():
        for package_dir in sorted(config.packages_dir.iterdir()):
            if package_dir.is_dir() and package_dir.name not in rows:
                metadata = read_sidecar(package_dir)
                version = metadata.version if metadata else "unknown"
                rows[package_dir.name] = (version, SHAPE_CLONE, "")

    if not rows:
        console.print("No packages installed")
        console.print("\nInstall packages with: purr install <name>")
        raise SystemExit(0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Type")
    table.add_column("Installed")

    for name in sorted(rows):
        table.add_row(name, *rows[name])

    console.print(table)


@click.command("list")
@click.option("--sort", "sort", help="Sort method (mostDownloads, recentlyUpdated, ...)")
@click.option("--category", "category", help="Only show packages in this category")
@click.option("--installed", is_flag=True, help="List locally installed packages instead")
def list_packages(sort: str | None, category: str | None, installed: bool):
    """List packages available in the registry."""
    if installed:
        list_installed()
        return

    with RegistryClient.from_config() as client:
        if category:
            packages = client.packages_by_category(category)
            if not packages:
                console.print("[yellow]No packages found for this category[/yellow]")
                raise SystemExit(0)

            console.print(f"[bold]Packages in '{category}' ({len(packages)})[/bold]")
            for pkg in packages:
                console.print(f"  • [cyan]{pkg.name}[/cyan] {pkg.version}")
                if pkg.description:
                    console.print(f"    [dim]{pkg.description}[/dim]")
            return

        results = client.list_packages(sort=sort)

    if results is None or not results.packages:
        console.print("[yellow]No packages available[/yellow]")
        raise SystemExit(0)

    console.print(f"[bold]Available packages ({results.package_count} total)[/bold]")
    for name in results.packages:
        console.print(f"  • [cyan]{name}[/cyan]")
