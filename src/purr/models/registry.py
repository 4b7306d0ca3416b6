"""Registry listing and statistics models."""

from dataclasses import dataclass, field

from purr.models.package import PackageMetadata


def _pick(data: dict, *keys, default=None):
    """Return the first key present in data (the registry mixes snake and camel case)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class PackageListResult:
    """Result of a registry listing or search."""

    package_count: int = 0
    packages: list[str] = field(default_factory=list)
    package_details: list[PackageMetadata] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict) -> "PackageListResult":
        details = _pick(data, "package_details", "packageDetails", default=[])
        packages = _pick(data, "packages", default=[])
        return cls(
            package_count=_pick(data, "package_count", "packageCount", default=len(packages)),
            packages=list(packages),
            package_details=[PackageMetadata.from_api_response(d) for d in details],
        )

    @property
    def is_empty(self) -> bool:
        return not self.packages and not self.package_details


@dataclass
class PackageSummary:
    """A package entry inside the statistics payload."""

    name: str
    version: str = ""
    downloads: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "PackageSummary":
        return cls(
            name=data.get("name", ""),
            version=data.get("version") or "",
            downloads=_pick(data, "downloads", "download_count", "downloadCount", default=0),
        )


@dataclass
class RegistryStatistics:
    """Aggregate counters returned by the registry."""

    total_packages: int = 0
    active_packages: int = 0
    total_downloads: int = 0
    total_views: int = 0
    popular_authors: list[str] = field(default_factory=list)
    most_downloaded: list[PackageSummary] = field(default_factory=list)
    recently_added: list[PackageSummary] = field(default_factory=list)
    last_updated: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "RegistryStatistics":
        return cls(
            total_packages=_pick(data, "total_packages", "totalPackages", default=0),
            active_packages=_pick(data, "active_packages", "activePackages", default=0),
            total_downloads=_pick(data, "total_downloads", "totalDownloads", default=0),
            total_views=_pick(data, "total_views", "totalViews", default=0),
            popular_authors=list(_pick(data, "popular_authors", "popularAuthors", default=[])),
            most_downloaded=[
                PackageSummary.from_api_response(p)
                for p in _pick(data, "most_downloaded", "mostDownloaded", default=[])
            ],
            recently_added=[
                PackageSummary.from_api_response(p)
                for p in _pick(data, "recently_added", "recentlyAdded", default=[])
            ],
            last_updated=_pick(data, "last_updated", "lastUpdated", default=""),
        )
