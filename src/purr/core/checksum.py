"""Checksum verification for downloaded release assets."""

import hashlib
import logging
import re
from pathlib import Path

import httpx

from purr.core.downloader import download_text
from purr.models.release import Asset

logger = logging.getLogger(__name__)

_HASH_FIRST = re.compile(r"([0-9a-fA-F]{64})\s+\*?(.+)")
_NAME_FIRST = re.compile(r"(.+?):\s*([0-9a-fA-F]{64})$")
_BARE_HASH = re.compile(r"[0-9a-fA-F]{64}")


class ChecksumError(Exception):
    """Checksum verification failed."""

    pass


def calculate_sha256(file_path: Path) -> str:
    """Calculate SHA256 hash of a file."""
    digest = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(64 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def find_checksum_asset(assets: list[Asset], target_asset: Asset) -> Asset | None:
    """Find a checksum file asset for the target asset."""
    target = target_asset.name.lower()

    # A per-asset checksum beats a combined checksums file
    for suffix in (".sha256", ".sha256sum"):
        for asset in assets:
            if asset.name.lower() == f"{target}{suffix}":
                return asset

    for asset in assets:
        name = asset.name.lower()
        if name in ("sha256sums", "sha256sums.txt", "checksums.txt", "checksums.sha256"):
            return asset
        if name.endswith(("_checksums.txt", "-checksums.txt", "_sha256sums.txt")):
            return asset

    return None


def parse_checksum_file(content: str, target_filename: str) -> str | None:
    """Find the SHA-256 for target_filename in a checksum file.

    Understands `sha256sum` output (`<hash>  <file>`, `<hash> *<file>`, paths
    allowed), `<file>: <hash>` lines, and a file holding a single bare hash.
    """
    wanted = target_filename.lower()
    lines = [line.strip() for line in content.splitlines() if line.strip()]

    for line in lines:
        hash_first = _HASH_FIRST.match(line)
        name_first = None if hash_first else _NAME_FIRST.match(line)
        if hash_first:
            digest, name = hash_first.groups()
            name = Path(name.strip()).name
        elif name_first:
            name, digest = name_first.groups()
            name = name.strip()
        else:
            continue
        if name.lower() == wanted:
            return digest.lower()

    if len(lines) == 1 and _BARE_HASH.fullmatch(lines[0]):
        return lines[0].lower()
    return None


def verify_checksum(
    file_path: Path,
    assets: list[Asset],
    target_asset: Asset,
    client: httpx.Client | None = None,
) -> bool:
    """Verify checksum of downloaded file if checksum is available.

    Returns True if the checksum matches, False if there was nothing to
    verify against. Raises ChecksumError if the checksum doesn't match.
    """
    checksum_asset = find_checksum_asset(assets, target_asset)
    if checksum_asset is None:
        return False

    checksum_content = download_text(checksum_asset.download_url, client=client)
    if checksum_content is None:
        logger.debug("Could not download %s, skipping verification", checksum_asset.name)
        return False

    expected_hash = parse_checksum_file(checksum_content, target_asset.name)
    if expected_hash is None:
        logger.debug("No entry for %s in %s", target_asset.name, checksum_asset.name)
        return False

    actual_hash = calculate_sha256(file_path)

    if actual_hash != expected_hash:
        raise ChecksumError(
            f"Checksum mismatch for {target_asset.name}:\n"
            f"  Expected: {expected_hash}\n"
            f"  Got:      {actual_hash}"
        )

    return True
