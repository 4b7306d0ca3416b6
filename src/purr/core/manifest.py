"""Ledger of what purr has installed (``manifest.yaml``)."""

from pathlib import Path
import logging

import yaml

from purr.core.config import get_config
from purr.models.package import InstalledPackage

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


class Manifest:
    """Records each successful install: version, shape and the files it put down.

    The manifest is a record, not the source of truth: a package counts as
    installed when its shim or clone directory exists on disk.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or get_config().manifest_path
        self._packages: dict[str, InstalledPackage] = {}
        self._load()

    def _load(self) -> None:
        logger.debug("Checking %s", self.path)
        if not self.path.exists():
            return

        with open(self.path) as f:
            data = yaml.safe_load(f) or {}

        if data.get("version", MANIFEST_VERSION) > MANIFEST_VERSION:
            logger.warning("%s was written by a newer purr; some fields may be ignored", self.path)

        for name, entry in (data.get("packages") or {}).items():
            self._packages[name] = InstalledPackage.from_dict(name, entry or {})

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": MANIFEST_VERSION,
            "packages": {name: pkg.to_dict() for name, pkg in sorted(self._packages.items())},
        }
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def get(self, name: str) -> InstalledPackage | None:
        return self._packages.get(name)

    def add(self, package: InstalledPackage) -> None:
        """Record an install, replacing any earlier record of the same package."""
        self._packages[package.name] = package
        self.save()

    def remove(self, name: str) -> InstalledPackage | None:
        """Forget a package. Returns the dropped record, if there was one."""
        package = self._packages.pop(name, None)
        if package is not None:
            self.save()
        return package

    def list_packages(self) -> list[InstalledPackage]:
        return [self._packages[name] for name in sorted(self._packages)]
