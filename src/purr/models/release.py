"""Release models for the upstream GitHub releases API."""

from dataclasses import dataclass, field

# Asset upload states other than this are partial uploads
UPLOADED = "uploaded"


@dataclass
class Asset:
    """A downloadable file attached to a release."""

    name: str
    download_url: str
    size: int = 0
    content_type: str = "application/octet-stream"

    @classmethod
    def from_api_response(cls, data: dict) -> "Asset":
        return cls(
            name=data["name"],
            download_url=data["browser_download_url"],
            size=data.get("size") or 0,
            content_type=data.get("content_type") or "application/octet-stream",
        )

    @property
    def size_mb(self) -> float:
        return self.size / (1024 * 1024)


@dataclass
class Release:
    """A tagged release and the assets usable for installation."""

    tag_name: str
    name: str = ""
    prerelease: bool = False
    draft: bool = False
    assets: list[Asset] = field(default_factory=list)
    published_at: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "Release":
        """Build a Release, dropping assets that are still uploading."""
        assets = [
            Asset.from_api_response(a)
            for a in data.get("assets") or []
            if a.get("state", UPLOADED) == UPLOADED and a.get("browser_download_url")
        ]
        return cls(
            tag_name=data["tag_name"],
            name=data.get("name") or data["tag_name"],
            prerelease=bool(data.get("prerelease")),
            draft=bool(data.get("draft")),
            assets=assets,
            published_at=data.get("published_at") or "",
        )

    @property
    def version(self) -> str:
        """Tag without a leading 'v' (v1.2.0 -> 1.2.0)."""
        return self.tag_name[1:] if self.tag_name[:1] in ("v", "V") else self.tag_name

    @property
    def label(self) -> str:
        label = self.tag_name
        if self.prerelease:
            label += " (pre-release)"
        return label
