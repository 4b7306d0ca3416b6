"""
Tests for the purr command line.
"""

import logging
from datetime import datetime

import httpx
import pytest
from click.testing import CliRunner

from purr import __version__
from purr.cli import main
from purr.core.manifest import Manifest
from purr.core.registry import RegistryClient
from purr.models.package import SHAPE_BINARY, InstalledPackage

from conftest import json_response, make_registry

FZF = {
    "name": "fzf",
    "version": "0.44.1",
    "description": "A command-line fuzzy finder",
    "authors": ["junegunn"],
    "git": "https://github.com/junegunn/fzf",
    "categories": ["cli"],
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def registry(mocker):
    """Route RegistryClient.from_config to a client answered by the given handler."""

    def install(handler):
        return mocker.patch.object(
            RegistryClient,
            "from_config",
            side_effect=lambda config=None: make_registry(handler),
        )

    return install


class TestCLIGlobal:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("install", "uninstall", "downgrade", "versions", "search", "list", "info", "stats"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_verbose_enables_debug_logging(self, runner, registry):
        registry(lambda request: json_response({"totalPackages": 1}))
        result = runner.invoke(main, ["-v", "stats"])
        assert result.exit_code == 0
        assert logging.getLogger("purr").level == logging.DEBUG

        runner.invoke(main, ["stats"])
        assert logging.getLogger("purr").level == logging.WARNING


class TestInstallCommands:
    def test_install_missing_package(self, runner, registry):
        registry(lambda request: httpx.Response(404))
        result = runner.invoke(main, ["install", "ghost"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "not found" in result.output

    def test_downgrade_without_version(self, runner, registry, config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(500)

        registry(handler)
        result = runner.invoke(main, ["downgrade", "fzf"])

        assert result.exit_code == 1
        assert "No version specified" in result.output
        assert "purr downgrade fzf@<version>" in result.output
        assert seen == []
        assert not config.base_dir.exists()

    def test_uninstall_not_installed(self, runner):
        result = runner.invoke(main, ["uninstall", "ghost"])
        assert result.exit_code == 1
        assert "not installed" in result.output

    def test_uninstall_binary(self, runner, config):
        config.bin_dir.mkdir(parents=True)
        (config.bin_dir / "tool").write_bytes(b"\x7fELF")

        result = runner.invoke(main, ["uninstall", "tool"])

        assert result.exit_code == 0
        assert not (config.bin_dir / "tool").exists()


class TestRegistryCommands:
    def test_search(self, runner, registry):
        registry(lambda request: json_response({"package_count": 1, "packages": ["fzf"], "package_details": [FZF]}))
        result = runner.invoke(main, ["search", "fuzzy"])
        assert result.exit_code == 0
        assert "fzf" in result.output
        assert "0.44.1" in result.output

    def test_search_no_results(self, runner, registry):
        registry(lambda request: json_response({"package_count": 0, "packages": []}))
        result = runner.invoke(main, ["search", "nothing"])
        assert result.exit_code == 0
        assert "No packages found" in result.output

    def test_list(self, runner, registry):
        seen = {}

        def handler(request):
            seen.update(dict(request.url.params))
            return json_response({"package_count": 2, "packages": ["fzf", "ripgrep"]})

        registry(handler)
        result = runner.invoke(main, ["list", "--sort", "mostDownloads"])

        assert result.exit_code == 0
        assert "ripgrep" in result.output
        assert seen["sort"] == "mostDownloads"

    def test_list_category(self, runner, registry):
        registry(lambda request: json_response([FZF]))
        result = runner.invoke(main, ["list", "--category", "cli"])
        assert result.exit_code == 0
        assert "fzf" in result.output

    def test_list_installed_empty(self, runner):
        result = runner.invoke(main, ["list", "--installed"])
        assert result.exit_code == 0
        assert "No packages installed" in result.output

    def test_list_installed(self, runner, config):
        config.bin_dir.mkdir(parents=True)
        (config.bin_dir / "tool").write_bytes(b"\x7fELF")
        Manifest(config.manifest_path).add(
            InstalledPackage(name="tool", version="3.1.4", shape=SHAPE_BINARY, installed_at=datetime(2024, 1, 1))
        )
        (config.packages_dir / "cloned").mkdir(parents=True)

        result = runner.invoke(main, ["list", "--installed"])

        assert result.exit_code == 0
        assert "tool" in result.output
        assert "3.1.4" in result.output
        assert "cloned" in result.output

    def test_info(self, runner, registry):
        registry(lambda request: json_response(FZF))
        result = runner.invoke(main, ["info", "fzf"])
        assert result.exit_code == 0
        assert "junegunn" in result.output

    def test_info_specific_version(self, runner, registry):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return json_response(FZF)

        registry(handler)
        runner.invoke(main, ["info", "fzf", "--version", "0.40.0"])
        assert seen == ["/api/v1/packages/fzf/0.40.0"]

    def test_info_not_found(self, runner, registry):
        registry(lambda request: httpx.Response(404))
        result = runner.invoke(main, ["info", "ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_versions(self, runner, registry):
        registry(lambda request: json_response(["0.44.1", "0.43.0"]))
        result = runner.invoke(main, ["versions", "fzf"])
        assert result.exit_code == 0
        assert "fzf@0.44.1 (latest)" in result.output
        assert "fzf@0.43.0" in result.output

    def test_versions_none(self, runner, registry):
        registry(lambda request: httpx.Response(404))
        result = runner.invoke(main, ["versions", "ghost"])
        assert result.exit_code == 1

    def test_stats(self, runner, registry):
        registry(lambda request: json_response({
            "totalPackages": 42,
            "activePackages": 40,
            "totalDownloads": 12345,
            "mostDownloaded": [{"name": "fzf", "downloads": 900}],
        }))
        result = runner.invoke(main, ["stats"])
        assert result.exit_code == 0
        assert "42" in result.output
        assert "12,345" in result.output
        assert "fzf" in result.output

    def test_stats_unavailable(self, runner, registry):
        registry(lambda request: httpx.Response(500))
        result = runner.invoke(main, ["stats"])
        assert result.exit_code == 1
