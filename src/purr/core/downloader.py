"""Release asset downloads with a rich progress bar."""

from pathlib import Path
import logging

import httpx
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from purr.core.config import get_config

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60.0
TEXT_TIMEOUT = 30.0
CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """An asset could not be downloaded."""

    pass


def _progress() -> Progress:
    return Progress(
        "[progress.description]{task.description}",
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
    )


def _save(response: httpx.Response, file_path: Path, show_progress: bool) -> None:
    total = int(response.headers.get("content-length") or 0)

    with open(file_path, "wb") as f:
        if not (show_progress and total):
            for chunk in response.iter_bytes(CHUNK_SIZE):
                f.write(chunk)
            return

        with _progress() as progress:
            task = progress.add_task(f"Downloading {file_path.name}", total=total)
            for chunk in response.iter_bytes(CHUNK_SIZE):
                f.write(chunk)
                progress.advance(task, len(chunk))


def download_file(
    url: str,
    dest: Path | None = None,
    filename: str | None = None,
    show_progress: bool = True,
    client: httpx.Client | None = None,
) -> Path:
    """Download url into dest (the cache directory by default).

    The file is named after the last URL segment unless filename is given.
    Redirects are followed. Raises DownloadError for any HTTP or disk failure.
    """
    dest = dest or get_config().cache_dir
    dest.mkdir(parents=True, exist_ok=True)
    file_path = dest / (filename or url.rsplit("/", 1)[-1].split("?", 1)[0] or "asset.bin")
    logger.debug("Downloading %s -> %s", url, file_path)

    stream = client.stream if client is not None else httpx.stream
    try:
        with stream("GET", url, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as response:
            if response.status_code != 200:
                raise DownloadError(f"Failed to download {url}: HTTP {response.status_code}")
            _save(response, file_path, show_progress)
    except httpx.HTTPError as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        raise DownloadError(f"Failed to write {file_path}: {e}") from e

    return file_path


def download_text(url: str, client: httpx.Client | None = None) -> str | None:
    """Fetch a small text file (checksums). Returns None on any failure."""
    get = client.get if client is not None else httpx.get
    try:
        response = get(url, follow_redirects=True, timeout=TEXT_TIMEOUT)
    except httpx.HTTPError as e:
        logger.debug("Could not fetch %s: %s", url, e)
        return None

    if response.status_code != 200:
        logger.debug("Could not fetch %s: HTTP %s", url, response.status_code)
        return None
    return response.text
