"""CLI entry point for purr."""

import click

from purr import __version__
from purr.core.log import setup_logging
from purr.commands import install, uninstall, update, list_cmd, search, info, versions, stats


@click.group()
@click.version_option(version=__version__, prog_name="purr")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (print commands, URLs and file operations)")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Purr - installer for packages from the FUR registry.

    Installs release binaries where a package publishes them, and falls
    back to cloning the package and running its installer script.

    Examples:

        purr install fzf

        purr install ripgrep@14.0.0

        purr downgrade ripgrep@13.0.0

        purr uninstall fzf
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


# Register commands
main.add_command(install.install)
main.add_command(uninstall.uninstall)
main.add_command(update.update)
main.add_command(update.upgrade)
main.add_command(update.downgrade)
main.add_command(versions.versions)
main.add_command(search.search)
main.add_command(list_cmd.list_packages)
main.add_command(info.info)
main.add_command(stats.stats)


if __name__ == "__main__":
    main()
