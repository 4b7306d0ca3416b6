"""Update, upgrade and downgrade command implementations."""

import click

from purr.commands.install import console, run_install
from purr.models.package import PackageSpec


@click.command()
@click.argument("package")
def update(package: str):
    """Update an installed package to the registry's current version."""
    console.print(f"[blue]Updating[/blue] {package}")
    run_install(lambda manager: manager.update(package))


@click.command()
@click.argument("package")
def upgrade(package: str):
    """Upgrade a package, optionally to a specific version (name@version)."""
    console.print(f"[blue]Upgrading[/blue] {package}")
    run_install(lambda manager: manager.upgrade(package))


@click.command()
@click.argument("package")
def downgrade(package: str):
    """Downgrade a package to a specific version (name@version)."""
    spec = PackageSpec.parse(package)
    # Without a version nothing is created on disk
    result = run_install(lambda manager: manager.downgrade(spec), prepare_dirs=bool(spec.version))
    if result is None:
        raise SystemExit(1)
