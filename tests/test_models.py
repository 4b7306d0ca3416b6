"""
Tests for package, registry and release models.
"""

from datetime import datetime

import pytest

from purr.models.package import SHAPE_BINARY, InstalledPackage, PackageMetadata, PackageSpec
from purr.models.registry import PackageListResult, RegistryStatistics
from purr.models.release import Release


class TestPackageSpec:
    @pytest.mark.parametrize(
        "raw, name, version",
        [
            ("fzf", "fzf", None),
            ("fzf@0.44.1", "fzf", "0.44.1"),
            ("fzf@", "fzf", None),
            ("a@b@c", "a", None),
            ("  ripgrep@14  ", "ripgrep", "14"),
        ],
    )
    def test_parse(self, raw, name, version):
        spec = PackageSpec.parse(raw)
        assert spec.name == name
        assert spec.version == version

    def test_str(self):
        assert str(PackageSpec("fzf")) == "fzf"
        assert str(PackageSpec("fzf", "1.0")) == "fzf@1.0"


class TestPackageMetadata:
    def test_from_api_response_reads_registry_keys(self):
        meta = PackageMetadata.from_api_response({
            "name": "tool",
            "version": "1.2.0",
            "authors": "someone",
            "issue_tracker": "https://github.com/o/tool/issues",
            "git": "https://github.com/o/tool",
            "mainfile": "bin/tool",
            "dependencies": None,
        })

        assert meta.authors == ["someone"]
        assert meta.issue_tracker.endswith("/issues")
        assert meta.main_file == "bin/tool"
        assert meta.dependencies == []
        assert meta.installer == ""

    def test_to_dict_uses_registry_keys(self):
        meta = PackageMetadata(name="tool", version="1.0", main_file="tool")
        data = meta.to_dict()
        assert data["mainfile"] == "tool"
        assert PackageMetadata.from_api_response(data) == meta


class TestInstalledPackage:
    def test_from_dict_parses_timestamp(self):
        pkg = InstalledPackage.from_dict("tool", {
            "version": "1.0",
            "installed_at": "2024-05-01T12:00:00",
            "files": ["tool"],
        })
        assert pkg.installed_at == datetime(2024, 5, 1, 12, 0)
        assert pkg.shape == SHAPE_BINARY
        assert pkg.files == ["tool"]


class TestRegistryModels:
    def test_list_result_accepts_camel_case(self):
        result = PackageListResult.from_api_response({
            "packageCount": 2,
            "packages": ["a", "b"],
            "packageDetails": [{"name": "a", "version": "1"}],
        })
        assert result.package_count == 2
        assert result.package_details[0].name == "a"
        assert not result.is_empty

    def test_empty_list_result(self):
        assert PackageListResult.from_api_response({}).is_empty

    def test_statistics(self):
        stats = RegistryStatistics.from_api_response({
            "total_packages": 10,
            "activePackages": 8,
            "totalDownloads": 1234,
            "most_downloaded": [{"name": "fzf", "downloadCount": 99}],
        })
        assert stats.total_packages == 10
        assert stats.active_packages == 8
        assert stats.total_downloads == 1234
        assert stats.most_downloaded[0].downloads == 99


class TestRelease:
    def test_version_strips_v(self):
        release = Release.from_api_response({"tag_name": "v1.2.3", "assets": []})
        assert release.version == "1.2.3"
        assert release.name == "v1.2.3"

    def test_assets(self):
        release = Release.from_api_response({
            "tag_name": "1.0",
            "assets": [{"name": "tool.zip", "browser_download_url": "https://x/tool.zip", "size": 10}],
        })
        assert release.assets[0].download_url == "https://x/tool.zip"
        assert release.assets[0].size == 10

    def test_partial_uploads_are_dropped(self):
        release = Release.from_api_response({
            "tag_name": "v1.0",
            "prerelease": True,
            "assets": [
                {"name": "done.zip", "browser_download_url": "https://x/done.zip", "state": "uploaded"},
                {"name": "partial.zip", "browser_download_url": "https://x/partial.zip", "state": "starter"},
            ],
        })
        assert [a.name for a in release.assets] == ["done.zip"]
        assert release.label == "v1.0 (pre-release)"
