"""GitHub API client for fetching release assets."""

import logging
import re

import httpx

from purr import __version__
from purr.models.release import Release


GITHUB_API_BASE = "https://api.github.com"
GITHUB_HOST = "github.com"
RELEASE_TIMEOUT = 30.0
REDIRECT_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Error resolving a repository or its releases."""

    pass


_SCP_PATTERN = re.compile(r"^(?:[\w.-]+@)?([\w.-]+):(?!//)([^/]+)/([^/]+?)(?:\.git)?/?$")
_URL_PATTERN = re.compile(
    r"^(?:https?|ssh|git)://(?:[^@/]+@)?([^/:]+)(?::\d+)?/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$"
)


def parse_git_remote(url: str) -> tuple[str, str, str]:
    """Parse a git remote into (host, owner, repo).

    Accepts:
    - https://github.com/owner/repo(.git)
    - ssh://git@github.com/owner/repo
    - git@github.com:owner/repo.git
    """
    url = (url or "").strip()
    if not url:
        raise GitHubError("No repository specified")

    match = _URL_PATTERN.match(url) or _SCP_PATTERN.match(url)
    if not match:
        raise GitHubError(f"Could not parse owner/repo from git URL: {url}")

    host, owner, repo = match.groups()
    if not owner or not repo:
        raise GitHubError(f"Could not parse owner/repo from git URL: {url}")
    return host.lower(), owner, repo


def is_github_host(host: str) -> bool:
    return host == GITHUB_HOST or host == f"www.{GITHUB_HOST}"


class GitHubClient:
    """Client for interacting with the GitHub releases API."""

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.client = httpx.Client(
            base_url=GITHUB_API_BASE,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": f"purr-cli/{__version__}",
            },
            timeout=RELEASE_TIMEOUT,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self.client.close()

    def _get_release(self, path: str, missing: str) -> Release:
        logger.debug("GET %s%s", GITHUB_API_BASE, path)
        try:
            response = self.client.get(path)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {e}") from e

        if response.status_code == 404:
            raise GitHubError(missing)
        if response.status_code == 403:
            raise GitHubError("GitHub API rate limit exceeded")
        if not response.is_success:
            raise GitHubError(f"GitHub API returned {response.status_code}")

        return Release.from_api_response(response.json())

    def get_latest_release(self, owner: str, repo: str) -> Release:
        """Get the latest published release."""
        return self._get_release(
            f"/repos/{owner}/{repo}/releases/latest",
            f"No releases found for {owner}/{repo}",
        )

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        """Get a specific release by tag name."""
        return self._get_release(
            f"/repos/{owner}/{repo}/releases/tags/{tag}",
            f"Release {tag} not found for {owner}/{repo}",
        )

    def get_release(self, owner: str, repo: str, version: str | None) -> Release:
        """Get the release for a declared version ("latest" or empty means latest).

        A bare version such as 1.2.0 also matches a v1.2.0 tag.
        """
        if not version or version == "latest":
            return self.get_latest_release(owner, repo)

        try:
            return self.get_release_by_tag(owner, repo, version)
        except GitHubError:
            if version.startswith("v"):
                raise
            return self.get_release_by_tag(owner, repo, f"v{version}")

    def resolve_redirect(self, url: str) -> str:
        """Follow HTTP redirects from url and return where they end.

        Failures are not errors: the original URL is returned unchanged.
        """
        if not url.startswith(("http://", "https://")):
            return url

        logger.debug("Probing %s for redirects", url)
        try:
            response = self.client.head(url, follow_redirects=True, timeout=REDIRECT_TIMEOUT)
        except httpx.HTTPError as e:
            logger.debug("Redirect probe failed for %s: %s", url, e)
            return url

        final = str(response.url)
        if final != url:
            logger.debug("%s redirects to %s", url, final)
        return final

    def resolve_repository(self, git_url: str) -> tuple[str, str]:
        """Resolve a package's git remote to a GitHub (owner, repo).

        Remotes on other hosts are probed once for a redirect to GitHub
        (vanity URLs); anything still off GitHub is unsupported.
        """
        parse_error = None
        try:
            host, owner, repo = parse_git_remote(git_url)
        except GitHubError as e:
            if not git_url.startswith(("http://", "https://")):
                raise
            parse_error, host, owner, repo = e, "", "", ""

        if is_github_host(host):
            return owner, repo

        resolved = self.resolve_redirect(git_url)
        if resolved != git_url:
            try:
                host, owner, repo = parse_git_remote(resolved)
                parse_error = None
            except GitHubError:
                pass

        if parse_error is not None:
            raise parse_error
        if not is_github_host(host):
            raise GitHubError(
                f"Release asset download only supports GitHub repositories (got {host})"
            )
        return owner, repo
