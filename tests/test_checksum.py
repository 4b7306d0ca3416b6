"""
Tests for release checksum verification.
"""

import hashlib

import httpx
import pytest

from purr.core.checksum import (
    ChecksumError,
    find_checksum_asset,
    parse_checksum_file,
    verify_checksum,
)
from purr.models.release import Asset

DIGEST = "a" * 64


def asset(name: str) -> Asset:
    return Asset(name=name, download_url=f"https://dl.test/{name}")


class TestFindChecksumAsset:
    def test_per_asset_file_preferred(self):
        target = asset("tool.tar.gz")
        assets = [target, asset("SHA256SUMS"), asset("tool.tar.gz.sha256")]
        assert find_checksum_asset(assets, target).name == "tool.tar.gz.sha256"

    def test_combined_file(self):
        target = asset("tool.tar.gz")
        assert find_checksum_asset([target, asset("tool_1.0_checksums.txt")], target).name == "tool_1.0_checksums.txt"

    def test_none(self):
        target = asset("tool.tar.gz")
        assert find_checksum_asset([target], target) is None


class TestParseChecksumFile:
    def test_sha256sum_format(self):
        content = f"{'b' * 64}  other.zip\n{DIGEST} *dist/tool.tar.gz\n"
        assert parse_checksum_file(content, "tool.tar.gz") == DIGEST

    def test_colon_format(self):
        assert parse_checksum_file(f"tool.tar.gz: {DIGEST.upper()}", "tool.tar.gz") == DIGEST

    def test_bare_hash(self):
        assert parse_checksum_file(f"{DIGEST}\n", "tool.tar.gz") == DIGEST

    def test_missing_entry(self):
        assert parse_checksum_file(f"{DIGEST}  other.zip", "tool.tar.gz") is None


class TestVerifyChecksum:
    def _client(self, text: str) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text=text)))

    def test_match(self, tmp_path):
        path = tmp_path / "tool.tar.gz"
        path.write_bytes(b"payload")
        digest = hashlib.sha256(b"payload").hexdigest()
        target = asset("tool.tar.gz")

        with self._client(f"{digest}  tool.tar.gz") as client:
            assert verify_checksum(path, [target, asset("SHA256SUMS")], target, client=client)

    def test_mismatch(self, tmp_path):
        path = tmp_path / "tool.tar.gz"
        path.write_bytes(b"tampered")
        target = asset("tool.tar.gz")

        with self._client(f"{DIGEST}  tool.tar.gz") as client:
            with pytest.raises(ChecksumError, match="Checksum mismatch"):
                verify_checksum(path, [target, asset("SHA256SUMS")], target, client=client)

    def test_no_checksum_asset(self, tmp_path):
        target = asset("tool.tar.gz")
        assert not verify_checksum(tmp_path / "tool.tar.gz", [target], target)
