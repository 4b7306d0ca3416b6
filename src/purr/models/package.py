"""Package data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PackageSpec:
    """A package request as typed on the command line (name or name@version)."""

    name: str
    version: str | None = None

    @classmethod
    def parse(cls, spec: str) -> "PackageSpec":
        """Parse 'name' or 'name@version'.

        Anything with more than one '@' is treated as a bare name
        (everything before the first '@') with no version.
        """
        parts = spec.strip().split("@")
        name = parts[0]
        version = parts[1] if len(parts) == 2 and parts[1] else None
        return cls(name=name, version=version)

    def __str__(self) -> str:
        if self.version:
            return f"{self.name}@{self.version}"
        return self.name


def _as_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class PackageMetadata:
    """Package metadata as served by the registry."""

    name: str
    version: str = ""
    description: str = ""
    authors: list[str] = field(default_factory=list)
    homepage: str = ""
    issue_tracker: str = ""
    git: str = ""
    installer: str = ""
    dependencies: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    main_file: str | None = None
    license: str = ""
    keywords: list[str] = field(default_factory=list)
    supported_platforms: list[str] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict) -> "PackageMetadata":
        """Create PackageMetadata from a registry response."""
        return cls(
            name=data["name"],
            version=data.get("version") or "",
            description=data.get("description") or "",
            authors=_as_list(data.get("authors")),
            homepage=data.get("homepage") or "",
            issue_tracker=data.get("issue_tracker") or "",
            git=data.get("git") or "",
            installer=data.get("installer") or "",
            dependencies=_as_list(data.get("dependencies")),
            categories=_as_list(data.get("categories")),
            main_file=data.get("mainfile") or None,
            license=data.get("license") or "",
            keywords=_as_list(data.get("keywords")),
            supported_platforms=_as_list(data.get("supported_platforms")),
        )

    def to_dict(self) -> dict:
        """Convert to the registry's JSON shape (used for the sidecar file)."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "authors": self.authors,
            "homepage": self.homepage,
            "issue_tracker": self.issue_tracker,
            "git": self.git,
            "installer": self.installer,
            "dependencies": self.dependencies,
            "categories": self.categories,
            "mainfile": self.main_file,
            "license": self.license,
            "keywords": self.keywords,
            "supported_platforms": self.supported_platforms,
        }


SHAPE_CLONE = "clone"
SHAPE_BINARY = "binary"


@dataclass
class InstalledPackage:
    """Represents an installed package in the manifest."""

    name: str
    version: str
    shape: str  # clone or binary
    installed_at: datetime
    files: list[str] = field(default_factory=list)
    path: str = ""  # package dir for clone installs, bin dir for binary installs

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return {
            "version": self.version,
            "shape": self.shape,
            "installed_at": self.installed_at.isoformat(),
            "files": self.files,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "InstalledPackage":
        """Create InstalledPackage from dictionary."""
        installed_at = data.get("installed_at")
        if isinstance(installed_at, str):
            installed_at = datetime.fromisoformat(installed_at)
        elif installed_at is None:
            installed_at = datetime.now()

        return cls(
            name=name,
            version=data.get("version", ""),
            shape=data.get("shape", SHAPE_BINARY),
            installed_at=installed_at,
            files=data.get("files", []),
            path=data.get("path", ""),
        )
