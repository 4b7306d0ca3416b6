"""Install orchestration: dependencies, asset installs, clone fallback, uninstall."""

from datetime import datetime
from pathlib import Path
from typing import Callable
import logging
import os
import tempfile

import click
import httpx
from rich.console import Console
from rich.markup import escape

from purr.core.checksum import ChecksumError, verify_checksum
from purr.core.config import PurrConfig, get_config
from purr.core.downloader import DownloadError, download_file
from purr.core.extractor import (
    ExtractionError,
    StagedBinary,
    install_asset,
    is_binary_installed,
    remove_binaries,
)
from purr.core.github import GitHubClient, GitHubError
from purr.core.manifest import Manifest
from purr.core.path_advice import path_advice
from purr.core.platform import (
    AssetSelectionError,
    PlatformInfo,
    get_platform_info,
    resolve_choice,
    select_asset,
)
from purr.core.registry import RegistryClient
from purr.core.source import SourceInstaller, wants_checkout
from purr.models.package import (
    SHAPE_BINARY,
    SHAPE_CLONE,
    InstalledPackage,
    PackageMetadata,
    PackageSpec,
)
from purr.models.release import Asset, Release

logger = logging.getLogger(__name__)

# Failures on the release-asset path that send us to the clone fallback
ASSET_FAILURES = (GitHubError, AssetSelectionError, DownloadError, ChecksumError, ExtractionError)

Chooser = Callable[[list[Asset]], Asset]


class PackageNotFoundError(Exception):
    """The registry has no such package (or version)."""

    pass


class CyclicDependencyError(Exception):
    """A package depends on itself, directly or through other packages."""

    pass


class InstallError(Exception):
    """A filesystem operation failed while installing or removing a package."""

    pass


def prompt_for_asset(candidates: list[Asset], console: Console | None = None) -> Asset:
    """Ask the operator to pick between equally good assets."""
    console = console or Console()
    console.print("\n[yellow]Multiple compatible assets found:[/yellow]")
    for i, asset in enumerate(candidates, 1):
        console.print(f"  {i}. [cyan]{asset.name}[/cyan] ({asset.size_mb:.1f} MB)")

    console.print("")
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        raw = click.prompt("Select asset number", default="1", show_default=True)
    else:
        # Piped or closed stdin: an empty read takes the default
        click.echo("Select asset number [1]: ", nl=False)
        raw = stdin.readline()
        click.echo("")
    return resolve_choice(candidates, raw)


class PackageManager:
    """Drives install, update, downgrade and uninstall flows."""

    def __init__(
        self,
        config: PurrConfig | None = None,
        registry: RegistryClient | None = None,
        github: GitHubClient | None = None,
        platform_info: PlatformInfo | None = None,
        console: Console | None = None,
        chooser: Chooser | None = None,
        http_client: httpx.Client | None = None,
        environ: dict | None = None,
    ):
        self.config = config or get_config()
        self.console = console or Console()
        self.platform_info = platform_info or get_platform_info()
        self.registry = registry or RegistryClient.from_config(self.config)
        self.github = github or GitHubClient()
        self.http = http_client or httpx.Client(follow_redirects=True)
        self.chooser = chooser or (lambda candidates: prompt_for_asset(candidates, self.console))
        self.environ = environ if environ is not None else dict(os.environ)
        self.source = SourceInstaller(self.config.packages_dir, self.platform_info, self.console)
        self.manifest = Manifest(self.config.manifest_path)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self.registry.close()
        self.github.close()
        self.http.close()

    # ── install ─────────────────────────────────────────────────

    def install(self, spec: str | PackageSpec, _chain: list[str] | None = None) -> PackageMetadata:
        """Install a package after its dependencies (depth-first).

        Raises PackageNotFoundError, CyclicDependencyError, InstallError and
        whatever the installer script raised.
        """
        if isinstance(spec, str):
            spec = PackageSpec.parse(spec)
        chain = list(_chain or [])

        if spec.name in chain:
            cycle = " -> ".join([*chain[chain.index(spec.name):], spec.name])
            raise CyclicDependencyError(f"Dependency cycle detected: {cycle}")

        self.console.print(f"[blue]Installing[/blue] {spec}")
        metadata = self.registry.get_package(spec.name, spec.version)
        if metadata is None:
            raise PackageNotFoundError(f"Package '{spec}' not found")

        chain.append(spec.name)
        for dependency in metadata.dependencies:
            self.console.print(f"  [blue]Dependency[/blue] {dependency}")
            self.install(dependency, chain)

        record = self._install_package(metadata)
        self.manifest.add(record)
        self.registry.track_download(metadata.name)

        self.console.print(
            f"[green]✓[/green] Installed [bold]{metadata.name}[/bold] {metadata.version}"
        )
        return metadata

    def _install_package(self, metadata: PackageMetadata) -> InstalledPackage:
        """Install one package (no dependencies) by whichever path applies."""
        try:
            if metadata.installer:
                return self._install_from_source(metadata)

            try:
                staged, release = self._install_from_asset(metadata)
            except ASSET_FAILURES as e:
                logger.debug("Asset install of %s failed: %r", metadata.name, e)
                self.console.print(
                    f"  [yellow]Warning:[/yellow] Could not install from release assets: {e}"
                )
                self.console.print(
                    "  Falling back to repository clone and running the installer if present."
                )
                return self._install_from_source(metadata)

            return InstalledPackage(
                name=metadata.name,
                version=metadata.version if wants_checkout(metadata.version) else release.version,
                shape=SHAPE_BINARY,
                installed_at=datetime.now(),
                files=staged.files,
                path=str(self.config.bin_dir),
            )
        except OSError as e:
            raise InstallError(f"Failed to install {metadata.name}: {e}") from e

    def _install_from_source(self, metadata: PackageMetadata) -> InstalledPackage:
        package_dir = self.source.install(metadata)
        return InstalledPackage(
            name=metadata.name,
            version=metadata.version,
            shape=SHAPE_CLONE,
            installed_at=datetime.now(),
            path=str(package_dir),
        )

    def _choose_asset(self, assets: list[Asset]) -> Asset:
        selection = select_asset(assets, self.platform_info)
        logger.debug("Asset candidates: %s", ", ".join(a.name for a in selection.candidates))
        if selection.needs_choice:
            return self.chooser(selection.candidates)
        return selection.chosen

    def _install_from_asset(self, metadata: PackageMetadata) -> tuple[StagedBinary, Release]:
        """Download the best release asset and stage its executable."""
        owner, repo = self.github.resolve_repository(metadata.git)
        release = self.github.get_release(owner, repo, metadata.version)
        self.console.print(f"  Found release: [green]{release.label}[/green] ({owner}/{repo})")

        asset = self._choose_asset(release.assets)
        self.console.print(f"  Selected asset: [cyan]{asset.name}[/cyan]")

        with tempfile.TemporaryDirectory(prefix="purr_") as tmp:
            asset_path = download_file(
                asset.download_url,
                dest=Path(tmp),
                filename=asset.name,
                show_progress=self.console.is_terminal,
                client=self.http,
            )
            if verify_checksum(asset_path, release.assets, asset, client=self.http):
                self.console.print("  [green]✓[/green] Checksum verified")

            staged = install_asset(
                asset_path,
                metadata.name,
                metadata.main_file,
                self.platform_info,
                self.config.bin_dir,
            )

        self.console.print(f"  Installed {staged.binary.name} to {self.config.bin_dir}")
        self.print_path_advice(metadata.name)
        return staged, release

    def print_path_advice(self, package_name: str) -> None:
        """Tell the user how to get the bin directory onto PATH (advisory only)."""
        bin_dir = self.config.bin_dir
        try:
            advice = path_advice(bin_dir, self.environ, self.platform_info)
        except (OSError, ValueError) as e:
            self.console.print(f"  [yellow]Warning:[/yellow] Could not determine PATH instructions: {e}")
            return

        if advice.on_path:
            self.console.print(f"  [dim]{bin_dir} is already in PATH. You can run '{package_name}' now.[/dim]")
            return

        self.console.print(f"  [yellow]Warning:[/yellow] {bin_dir} is not currently in your PATH.")
        for label, command in advice.lines:
            self.console.print(f"  {escape(label)}:")
            self.console.print(f"    [dim]{escape(command)}[/dim]", highlight=False)
        self.console.print(
            f"  After adding, open a new shell or source your rc file to run '{package_name}'."
        )

    # ── update / upgrade / downgrade ────────────────────────────

    def update(self, spec: str | PackageSpec) -> PackageMetadata:
        """Re-run install for a package (picks up the registry's current version)."""
        return self.install(spec)

    def upgrade(self, spec: str | PackageSpec) -> PackageMetadata:
        """Install a package at the requested (or latest) version."""
        return self.install(spec)

    def downgrade(self, spec: str | PackageSpec) -> PackageMetadata | None:
        """Install an explicit older version. Refuses to run without one."""
        if isinstance(spec, str):
            spec = PackageSpec.parse(spec)

        if not spec.version:
            self.console.print(
                f"[yellow]Warning:[/yellow] No version specified. "
                f"Use 'purr versions {spec.name}' to see available versions."
            )
            self.console.print(f"Usage: purr downgrade {spec.name}@<version>")
            return None

        self.console.print(f"[blue]Downgrading[/blue] {spec.name} to {spec.version}")
        return self.install(spec)

    # ── uninstall ───────────────────────────────────────────────

    def is_installed(self, name: str) -> bool:
        return self.source.is_installed(name) or is_binary_installed(
            name, self.config.bin_dir, self.platform_info
        )

    def uninstall(self, name: str) -> bool:
        """Remove both install shapes of a package. Returns False if nothing was installed."""
        removed_any = False
        failure = None

        try:
            if self.source.uninstall(name):
                self.console.print(f"  Removed {self.source.package_dir(name)}")
                removed_any = True
        except OSError as e:
            failure = InstallError(f"Failed to remove {self.source.package_dir(name)}: {e}")

        record = self.manifest.get(name)
        extra = record.files if record and record.shape == SHAPE_BINARY else []
        try:
            removed = remove_binaries(name, self.config.bin_dir, extra)
        except ExtractionError as e:
            raise InstallError(str(e)) from e

        if removed:
            self.console.print(f"  Removed binaries: {', '.join(removed)}")
            removed_any = True

        if failure is not None:
            raise failure

        self.manifest.remove(name)
        if not removed_any:
            self.console.print(f"[yellow]Warning:[/yellow] Package '{name}' is not installed")
            return False

        self.console.print(f"[green]✓[/green] Uninstalled [bold]{name}[/bold]")
        return True
