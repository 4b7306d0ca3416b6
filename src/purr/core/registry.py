"""Client for the FUR package registry API."""

import logging
import threading
from urllib.parse import quote

import httpx

from purr import __version__
from purr.core.config import get_config
from purr.models.package import PackageMetadata
from purr.models.registry import PackageListResult, RegistryStatistics

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30.0
TRACK_JOIN_TIMEOUT = 5.0


class RegistryError(Exception):
    """Error talking to the registry."""

    pass


class RegistryClient:
    """Read-only client for the package registry.

    Every registry URL is tried in order and the first successful answer wins.
    Network failures, timeouts and non-2xx answers are all reported as absence
    (None or an empty list); callers never see transport errors.
    """

    def __init__(
        self,
        base_urls: list[str],
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        if not base_urls:
            raise ValueError("At least one registry URL is required")
        self.base_urls = [url.rstrip("/") for url in base_urls]
        self.client = httpx.Client(
            headers={"User-Agent": f"purr-cli/{__version__}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self._pending: list[threading.Thread] = []

    @classmethod
    def from_config(cls, config=None) -> "RegistryClient":
        """Create a client for the configured registry URLs."""
        config = config or get_config()
        return cls(config.registry_urls)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        """Wait briefly for download tracking to finish, then close the HTTP client."""
        for thread in self._pending:
            thread.join(timeout=TRACK_JOIN_TIMEOUT)
        self._pending.clear()
        self.client.close()

    def _request(self, method: str, path: str, params: dict | None = None) -> httpx.Response:
        """Send a request to each registry in turn; raise RegistryError if none succeeds."""
        last_error = "no registry answered"
        for base in self.base_urls:
            url = f"{base}{path}"
            logger.debug("%s %s %s", method, url, params or "")
            try:
                response = self.client.request(method, url, params=params)
            except httpx.HTTPError as e:
                last_error = f"{url}: {e}"
                logger.debug("Request failed: %s", last_error)
                continue

            if response.is_success:
                return response
            last_error = f"{url}: HTTP {response.status_code}"
            logger.debug("Request failed: %s", last_error)

        raise RegistryError(last_error)

    def _get_json(self, path: str, params: dict | None = None):
        try:
            return self._request("GET", path, params=params).json()
        except (RegistryError, ValueError) as e:
            logger.debug("Treating %s as absent: %s", path, e)
            return None

    def get_package(self, name: str, version: str | None = None) -> PackageMetadata | None:
        """Fetch metadata for a package (optionally a specific version)."""
        path = f"/packages/{quote(name, safe='')}"
        if version:
            path += f"/{quote(version, safe='')}"

        data = self._get_json(path)
        if not isinstance(data, dict) or not data.get("name"):
            return None
        return PackageMetadata.from_api_response(data)

    def list_packages(
        self,
        sort: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
        details: bool = False,
    ) -> PackageListResult | None:
        """List packages, optionally sorted or filtered by a search query."""
        params: dict = {
            "page": page,
            "pageSize": page_size,
            "details": str(details).lower(),
        }
        if sort:
            params["sort"] = sort
        if search:
            params["search"] = search

        data = self._get_json("/packages", params=params)
        if not isinstance(data, dict):
            return None
        return PackageListResult.from_api_response(data)

    def search(self, query: str) -> PackageListResult | None:
        """Search packages by name, description or keyword."""
        return self.list_packages(search=query, page_size=100, details=True)

    def packages_by_category(self, category: str) -> list[PackageMetadata]:
        """List the packages in a category."""
        data = self._get_json(f"/packages/categories/{quote(category, safe='')}")
        if not isinstance(data, list):
            return []
        return [PackageMetadata.from_api_response(item) for item in data if item.get("name")]

    def get_versions(self, name: str) -> list[str]:
        """Get the published versions of a package, newest first."""
        data = self._get_json(f"/packages/{quote(name, safe='')}/versions")
        if not isinstance(data, list):
            return []
        return [str(v) for v in data]

    def get_statistics(self) -> RegistryStatistics | None:
        """Get aggregate registry statistics."""
        data = self._get_json("/packages/statistics")
        if not isinstance(data, dict):
            return None
        return RegistryStatistics.from_api_response(data)

    def track_download(self, name: str) -> None:
        """Record a download without blocking the caller. Failures are ignored."""
        thread = threading.Thread(
            target=self._post_download,
            args=(name,),
            name=f"track-download-{name}",
            daemon=True,
        )
        self._pending.append(thread)
        thread.start()

    def _post_download(self, name: str) -> None:
        try:
            self._request("POST", f"/packages/{quote(name, safe='')}/download")
        except RegistryError as e:
            logger.debug("Download tracking for %s failed: %s", name, e)
