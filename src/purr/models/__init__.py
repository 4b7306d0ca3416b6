"""Data models for purr."""

from purr.models.package import InstalledPackage, PackageMetadata, PackageSpec
from purr.models.registry import PackageListResult, RegistryStatistics
from purr.models.release import Release, Asset

__all__ = [
    "PackageSpec",
    "PackageMetadata",
    "InstalledPackage",
    "PackageListResult",
    "RegistryStatistics",
    "Release",
    "Asset",
]
