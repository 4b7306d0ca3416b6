"""Clone-based installs: git checkout of a package plus its installer script."""

from pathlib import Path
import json
import logging
import shutil

from rich.console import Console

from purr.core.platform import PlatformInfo, get_platform_info
from purr.core.scripts import ScriptError, UnsupportedScriptError, run_command, run_script
from purr.models.package import PackageMetadata

logger = logging.getLogger(__name__)

SIDECAR_NAME = "purrconfig.json"
LEGACY_SIDECAR_NAMES = ("furconfig.json", "fursettings.json")


class GitError(Exception):
    """A git operation failed."""

    pass


def wants_checkout(version: str | None) -> bool:
    return bool(version) and version != "latest"


def uninstaller_name(installer: str) -> str:
    """Derive the uninstall script from the installer (install.sh -> uninstall.sh)."""
    return installer.replace("install", "uninstall")


def read_sidecar(package_dir: Path) -> PackageMetadata | None:
    """Read the metadata saved next to a clone-shape install."""
    for name in (SIDECAR_NAME, *LEGACY_SIDECAR_NAMES):
        path = package_dir / name
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Ignoring unreadable %s: %s", path, e)
            continue
        if isinstance(data, dict) and data.get("name"):
            return PackageMetadata.from_api_response(data)
    return None


def write_sidecar(package_dir: Path, metadata: PackageMetadata) -> Path:
    path = package_dir / SIDECAR_NAME
    path.write_text(json.dumps(metadata.to_dict(), indent=2), encoding="utf-8")
    return path


class SourceInstaller:
    """Installs packages by cloning their repository and running the installer."""

    def __init__(
        self,
        packages_dir: Path,
        platform_info: PlatformInfo | None = None,
        console: Console | None = None,
    ):
        self.packages_dir = packages_dir
        self.platform_info = platform_info or get_platform_info()
        self.console = console or Console()

    def package_dir(self, name: str) -> Path:
        return self.packages_dir / name

    def is_installed(self, name: str) -> bool:
        return self.package_dir(name).is_dir()

    def _git(self, *args: str) -> None:
        try:
            run_command(["git", *args])
        except ScriptError as e:
            raise GitError(str(e)) from e

    def clone(self, package_dir: Path, metadata: PackageMetadata) -> None:
        """Clone the package repository, then try to check out its version."""
        if not metadata.git:
            raise GitError(f"Package '{metadata.name}' does not declare a git repository")

        self.console.print(f"  [blue]Cloning[/blue] {metadata.git}")
        package_dir.mkdir(parents=True, exist_ok=True)
        self._git("clone", metadata.git, str(package_dir))

        if wants_checkout(metadata.version):
            try:
                self._git("-C", str(package_dir), "checkout", metadata.version)
                self.console.print(f"  Switched to version [green]{metadata.version}[/green]")
            except GitError as e:
                logger.debug("Checkout failed: %s", e)
                self.console.print(
                    f"  [yellow]Warning:[/yellow] Could not find version {metadata.version}, "
                    "using default branch"
                )

    def update(self, package_dir: Path, metadata: PackageMetadata) -> None:
        """Fetch and switch an existing checkout to the declared version."""
        self.console.print(f"  [blue]Updating[/blue] {metadata.name} to {metadata.version or 'latest'}")
        try:
            self._git("-C", str(package_dir), "fetch", "--all", "--tags")
        except GitError as e:
            self.console.print(f"  [yellow]Warning:[/yellow] Failed to update existing package: {e}")
            self.console.print("  Proceeding with current local version...")
            return

        if wants_checkout(metadata.version):
            try:
                self._git("-C", str(package_dir), "checkout", metadata.version)
                self.console.print(f"  Switched to version [green]{metadata.version}[/green]")
            except GitError:
                try:
                    self._git("-C", str(package_dir), "checkout", f"origin/{metadata.version}")
                    self.console.print(
                        f"  Switched to remote branch [green]origin/{metadata.version}[/green]"
                    )
                except GitError as e:
                    logger.debug("Checkout failed: %s", e)
                    self.console.print(
                        f"  [yellow]Warning:[/yellow] Could not find version {metadata.version}, "
                        "staying on current branch"
                    )

        # A detached tag checkout has nothing to pull
        try:
            self._git("-C", str(package_dir), "pull")
        except GitError as e:
            logger.debug("Ignoring pull failure: %s", e)

    def sync(self, metadata: PackageMetadata) -> Path:
        """Clone the package, or update it if a checkout already exists."""
        package_dir = self.package_dir(metadata.name)
        logger.debug("Checking %s", package_dir / ".git")
        if (package_dir / ".git").is_dir():
            self.update(package_dir, metadata)
        else:
            self.clone(package_dir, metadata)
        return package_dir

    def install(self, metadata: PackageMetadata) -> Path:
        """Clone/update the package and run its installer script.

        A missing installer script only warns. A failing one raises
        ScriptError so the package is not recorded as installed.
        """
        package_dir = self.sync(metadata)

        if metadata.installer:
            installer_path = package_dir / metadata.installer
            logger.debug("Checking %s", installer_path)
            if installer_path.is_file():
                self.console.print(f"  [blue]Running[/blue] {metadata.installer}")
                try:
                    run_script(
                        installer_path,
                        metadata.name,
                        install_dir=package_dir,
                        stream=True,
                        platform_info=self.platform_info,
                    )
                except (ScriptError, UnsupportedScriptError) as e:
                    self.console.print(f"  [red]Installer failed:[/red] {e}")
                    raise
                self.console.print("  [green]✓[/green] Installer completed successfully")
            else:
                self.console.print(
                    f"  [yellow]Warning:[/yellow] Installer script '{metadata.installer}' "
                    "not found, skipping"
                )
        else:
            logger.debug("No installer declared for %s, clone only", metadata.name)

        write_sidecar(package_dir, metadata)
        return package_dir

    def uninstall(self, name: str) -> bool:
        """Run the derived uninstaller (if any) and delete the checkout.

        Returns False if there was no clone-shape install to remove.
        """
        package_dir = self.package_dir(name)
        logger.debug("Checking %s", package_dir)
        if not package_dir.is_dir():
            return False

        metadata = read_sidecar(package_dir)
        if metadata and metadata.installer:
            script = uninstaller_name(metadata.installer)
            script_path = package_dir / script
            if script != metadata.installer and script_path.is_file():
                self.console.print(f"  [blue]Running[/blue] {script}")
                try:
                    run_script(
                        script_path,
                        name,
                        install_dir=package_dir,
                        stream=True,
                        platform_info=self.platform_info,
                    )
                    self.console.print("  [green]✓[/green] Uninstaller completed successfully")
                except (ScriptError, UnsupportedScriptError) as e:
                    self.console.print(f"  [yellow]Warning:[/yellow] Uninstaller failed: {e}")

        shutil.rmtree(package_dir)
        return True
