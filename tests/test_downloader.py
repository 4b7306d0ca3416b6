"""
Tests for asset downloads.
"""

import httpx
import pytest

from purr.core.downloader import DownloadError, download_file, download_text


def client_for(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestDownloadFile:
    def test_writes_file(self, tmp_path):
        with client_for(lambda request: httpx.Response(200, content=b"binary")) as client:
            path = download_file("https://dl.test/a/tool.zip?x=1", dest=tmp_path, show_progress=False, client=client)

        assert path == tmp_path / "tool.zip"
        assert path.read_bytes() == b"binary"

    def test_defaults_to_cache_dir(self, config):
        with client_for(lambda request: httpx.Response(200, content=b"x")) as client:
            path = download_file("https://dl.test/tool", show_progress=False, client=client)
        assert path.parent == config.cache_dir

    def test_http_error_status(self, tmp_path):
        with client_for(lambda request: httpx.Response(404)) as client:
            with pytest.raises(DownloadError, match="HTTP 404"):
                download_file("https://dl.test/tool.zip", dest=tmp_path, client=client)

    def test_network_error(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        with client_for(handler) as client:
            with pytest.raises(DownloadError):
                download_file("https://dl.test/tool.zip", dest=tmp_path, client=client)


class TestDownloadText:
    def test_ok(self):
        with client_for(lambda request: httpx.Response(200, text="hello")) as client:
            assert download_text("https://dl.test/SHA256SUMS", client=client) == "hello"

    def test_failure_is_none(self):
        with client_for(lambda request: httpx.Response(500)) as client:
            assert download_text("https://dl.test/SHA256SUMS", client=client) is None
