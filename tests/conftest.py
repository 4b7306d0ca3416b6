"""
Shared pytest configuration and fixtures for purr tests.
"""

import io
import json

import httpx
import pytest
from rich.console import Console

from purr.core.config import PurrConfig, set_config
from purr.core.platform import PlatformInfo
from purr.core.registry import RegistryClient

REGISTRY_URL = "https://registry.test/api/v1"


@pytest.fixture(autouse=True)
def config(tmp_path, monkeypatch):
    """A purr config rooted in a temporary directory (nothing created yet)."""
    monkeypatch.delenv("PURR_REGISTRY_URL", raising=False)
    monkeypatch.delenv("PURR_HOME", raising=False)

    cfg = PurrConfig.for_base(tmp_path / "purr")
    cfg.registry_urls = [REGISTRY_URL]
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def linux_x64():
    return PlatformInfo(os="linux", arch="x64")


@pytest.fixture
def win_x64():
    return PlatformInfo(os="win", arch="x64")


@pytest.fixture
def console():
    """A console that records output instead of writing to the terminal."""
    return Console(file=io.StringIO(), width=200, color_system=None)


def console_output(console: Console) -> str:
    return console.file.getvalue()


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(data).encode(), headers={"Content-Type": "application/json"})


def make_registry(handler, base_urls=None) -> RegistryClient:
    """RegistryClient whose requests are answered by handler(request)."""
    return RegistryClient(base_urls or [REGISTRY_URL], transport=httpx.MockTransport(handler))
