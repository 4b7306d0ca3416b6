"""Platform detection and release asset selection."""

import platform
from dataclasses import dataclass, field

from purr.models.release import Asset


class AssetSelectionError(Exception):
    """No release asset could be selected."""

    pass


@dataclass(frozen=True)
class PlatformInfo:
    """Current platform information."""

    os: str  # win, osx, linux
    arch: str  # x64, x86, arm64, arm

    @classmethod
    def detect(cls) -> "PlatformInfo":
        """Detect current platform."""
        system = platform.system().lower()
        machine = platform.machine().lower()

        # Normalize OS
        if system == "windows" or system.startswith(("cygwin", "msys")):
            os_name = "win"
        elif system == "darwin":
            os_name = "osx"
        elif system == "linux":
            os_name = "linux"
        else:
            os_name = system

        # Normalize architecture
        if machine in ("x86_64", "amd64", "x64"):
            arch = "x64"
        elif machine in ("arm64", "aarch64"):
            arch = "arm64"
        elif machine in ("i386", "i686", "x86"):
            arch = "x86"
        elif machine.startswith("arm"):
            arch = "arm"
        else:
            arch = machine

        return cls(os=os_name, arch=arch)

    @property
    def is_windows(self) -> bool:
        return self.os == "win"

    @property
    def exe_suffix(self) -> str:
        """Native executable extension ('' on Unix-like systems)."""
        return ".exe" if self.is_windows else ""


# Always appended after the platform-specific patterns
FALLBACK_PATTERNS = ["linux", "win", "osx", "darwin", "mac"]

# Release files that are never the thing to install
SKIP_SUFFIXES = (".sha256", ".sha512", ".sig", ".asc", ".txt", ".md", ".sbom", ".pem")


def match_patterns(platform_info: PlatformInfo) -> list[str]:
    """Build match patterns from most to least specific."""
    os_name, arch = platform_info.os, platform_info.arch
    patterns = [f"{os_name}-{arch}", f"{os_name}{arch}", arch, os_name, *FALLBACK_PATTERNS]

    ordered = []
    for pattern in patterns:
        if pattern and pattern not in ordered:
            ordered.append(pattern)
    return ordered


def score_asset(name: str, patterns: list[str]) -> int | None:
    """Score an asset name. Lower is better, None means no pattern matched."""
    lower = name.lower()
    if lower.endswith(SKIP_SUFFIXES):
        return None

    for index, pattern in enumerate(patterns):
        if pattern in lower:
            return index
    return None


@dataclass
class AssetSelection:
    """Outcome of asset selection.

    Either a single asset was chosen, or several assets tied for the best
    score and the operator has to pick one (see resolve_choice).
    """

    candidates: list[Asset] = field(default_factory=list)
    score: int | None = None

    @property
    def needs_choice(self) -> bool:
        return len(self.candidates) > 1

    @property
    def chosen(self) -> Asset | None:
        if len(self.candidates) == 1:
            return self.candidates[0]
        return None


def select_asset(assets: list[Asset], platform_info: PlatformInfo | None = None) -> AssetSelection:
    """Select the best asset(s) for the platform.

    Assets are scored by the first matching pattern; the minimum score wins.
    With no scored asset the first asset is used as-is.
    """
    if not assets:
        raise AssetSelectionError("No release assets found")

    if platform_info is None:
        platform_info = PlatformInfo.detect()

    patterns = match_patterns(platform_info)
    scored = [(score_asset(asset.name, patterns), asset) for asset in assets]
    scored = [(score, asset) for score, asset in scored if score is not None]

    if not scored:
        return AssetSelection(candidates=[assets[0]])

    best = min(score for score, _ in scored)
    return AssetSelection(
        candidates=[asset for score, asset in scored if score == best],
        score=best,
    )


def resolve_choice(candidates: list[Asset], raw: str | None) -> Asset:
    """Turn operator input into one of the candidates.

    Empty, non-numeric and out-of-range input all fall back to the first option.
    """
    if not candidates:
        raise AssetSelectionError("No candidates to choose from")

    text = (raw or "").strip()
    if not text.isdigit():
        return candidates[0]

    index = int(text)
    if 1 <= index <= len(candidates):
        return candidates[index - 1]
    return candidates[0]


def get_platform_info() -> PlatformInfo:
    """Get current platform information."""
    return PlatformInfo.detect()
