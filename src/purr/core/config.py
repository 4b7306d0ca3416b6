"""Configuration and path management for purr."""

from pathlib import Path
from dataclasses import dataclass, field
import logging
import os

import yaml

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://purr.finite.ovh/api/v1"


@dataclass
class PurrConfig:
    """Configuration for the purr package installer."""

    base_dir: Path
    packages_dir: Path
    bin_dir: Path
    cache_dir: Path
    manifest_path: Path
    settings_path: Path
    registry_urls: list[str] = field(default_factory=lambda: [DEFAULT_REGISTRY_URL])

    @classmethod
    def default(cls) -> "PurrConfig":
        """Create config with default paths."""
        base = Path(os.environ.get("PURR_HOME", Path.home() / ".purr"))
        return cls.for_base(base)

    @classmethod
    def for_base(cls, base: Path) -> "PurrConfig":
        """Create config rooted at base, reading registry URLs from the environment or settings."""
        config = cls(
            base_dir=base,
            packages_dir=base / "packages",
            bin_dir=base / "bin",
            cache_dir=base / "cache",
            manifest_path=base / "manifest.yaml",
            settings_path=base / "settings.yaml",
        )
        config.registry_urls = load_registry_urls(config.settings_path)
        return config

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.packages_dir.mkdir(parents=True, exist_ok=True)
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)


def load_registry_urls(settings_path: Path) -> list[str]:
    """Resolve registry URLs: PURR_REGISTRY_URL, then settings.yaml, then the default."""
    env_value = os.environ.get("PURR_REGISTRY_URL", "").strip()
    if env_value:
        return [url.strip().rstrip("/") for url in env_value.split(",") if url.strip()]

    if settings_path.exists():
        try:
            with open(settings_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", settings_path, e)
            data = {}

        urls = data.get("registry_urls") if isinstance(data, dict) else None
        if isinstance(urls, str):
            urls = [urls]
        if urls:
            return [str(url).rstrip("/") for url in urls]

    return [DEFAULT_REGISTRY_URL]


# Global config instance
_config: PurrConfig | None = None


def get_config() -> PurrConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = PurrConfig.default()
    return _config


def set_config(config: PurrConfig | None) -> None:
    """Set a custom configuration (useful for testing)."""
    global _config
    _config = config
