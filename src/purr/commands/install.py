"""Install command implementation."""

from typing import Callable

import click
from rich.console import Console

from purr.core.config import get_config
from purr.core.manager import (
    CyclicDependencyError,
    InstallError,
    PackageManager,
    PackageNotFoundError,
)
from purr.core.scripts import ScriptError, UnsupportedScriptError
from purr.core.source import GitError

console = Console()

# Failures that end an install command
INSTALL_ERRORS = (
    PackageNotFoundError,
    CyclicDependencyError,
    InstallError,
    GitError,
    ScriptError,
    UnsupportedScriptError,
)


def run_install(action: Callable[[PackageManager], object], prepare_dirs: bool = True) -> object:
    """Run an install-style action and turn failures into one error line and exit 1."""
    config = get_config()
    if prepare_dirs:
        config.ensure_dirs()

    with PackageManager(config=config, console=console) as manager:
        try:
            return action(manager)
        except INSTALL_ERRORS as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)


@click.command()
@click.argument("package")
def install(package: str):
    """Install a package and its dependencies.

    PACKAGE is a package name with an optional version (name@version).
    """
    run_install(lambda manager: manager.install(package))
