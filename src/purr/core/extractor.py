"""Archive extraction and executable staging."""

from dataclasses import dataclass
from pathlib import Path
import logging
import os
import shutil
import stat
import tarfile
import tempfile
import zipfile

from purr.core.platform import PlatformInfo

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Error extracting an asset or staging its executable."""

    pass


# Debug symbols, manifests, docs and checksums are never entry points
EXCLUDED_SUFFIXES = {
    ".pdb", ".dbg", ".debug", ".dsym", ".map", ".manifest",
    ".md", ".txt", ".rst", ".html", ".htm", ".pdf",
    ".sha256", ".sha512", ".md5", ".sig", ".asc", ".pem",
    ".json", ".xml", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".conf",
    ".png", ".jpg", ".svg", ".ico",
    ".dll", ".so", ".dylib", ".a", ".lib", ".h",
}

EXCLUDED_STEMS = {"license", "licence", "readme", "changelog", "copying", "notice", "authors"}

UNIX_CANDIDATE_SUFFIXES = {"", ".sh", ".py", ".rb", ".js", ".bin", ".run", ".appimage"}
WINDOWS_CANDIDATE_SUFFIXES = {".exe", ".cmd", ".bat", ".ps1", ".py", ".js"}

ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2", ".tar")

# Extraction filters exist from 3.10.12 and 3.11.4 on
_TAR_EXTRACT_ARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


@dataclass
class StagedBinary:
    """An executable staged into the bin directory plus its name-stable shim."""

    binary: Path
    shim: Path

    @property
    def files(self) -> list[str]:
        names = [self.binary.name]
        if self.shim != self.binary:
            names.append(self.shim.name)
        return names


def is_executable(path: Path) -> bool:
    """Check if a file is likely an executable binary."""
    if not path.is_file():
        return False

    # Check for common binary signatures
    try:
        with open(path, "rb") as f:
            header = f.read(4)
            # ELF binary
            if header[:4] == b"\x7fELF":
                return True
            # Mach-O binary (macOS)
            if header[:4] in (
                b"\xfe\xed\xfa\xce",  # 32-bit
                b"\xfe\xed\xfa\xcf",  # 64-bit
                b"\xca\xfe\xba\xbe",  # Universal
                b"\xcf\xfa\xed\xfe",  # 64-bit reversed
                b"\xce\xfa\xed\xfe",  # 32-bit reversed
            ):
                return True
            # Windows PE
            if header[:2] == b"MZ":
                return True
            # Script
            if header[:2] == b"#!":
                return True
    except OSError:
        pass

    # Already marked executable
    return os.access(path, os.X_OK)


def make_executable(path: Path) -> None:
    """Make a file executable."""
    current = path.stat().st_mode
    path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def is_archive(path: Path) -> bool:
    """Check whether a downloaded asset is an archive we can extract."""
    return path.name.lower().endswith(ARCHIVE_SUFFIXES)


def extract_archive(archive_path: Path, dest_dir: Path | None = None) -> Path:
    """Extract an archive to a directory (a new temporary one by default).

    Returns the directory containing extracted files.
    """
    if dest_dir is None:
        dest_dir = Path(tempfile.mkdtemp(prefix="purr_"))
    else:
        dest_dir.mkdir(parents=True, exist_ok=True)

    name = archive_path.name.lower()
    logger.debug("Extracting %s -> %s", archive_path, dest_dir)

    try:
        if name.endswith(".zip"):
            with zipfile.ZipFile(archive_path, "r") as zf:
                zf.extractall(dest_dir)

        elif name.endswith((".tar.gz", ".tgz")):
            with tarfile.open(archive_path, "r:gz") as tar:
                tar.extractall(dest_dir, **_TAR_EXTRACT_ARGS)

        elif name.endswith((".tar.xz", ".txz")):
            with tarfile.open(archive_path, "r:xz") as tar:
                tar.extractall(dest_dir, **_TAR_EXTRACT_ARGS)

        elif name.endswith(".tar.bz2"):
            with tarfile.open(archive_path, "r:bz2") as tar:
                tar.extractall(dest_dir, **_TAR_EXTRACT_ARGS)

        elif name.endswith(".tar"):
            with tarfile.open(archive_path, "r:") as tar:
                tar.extractall(dest_dir, **_TAR_EXTRACT_ARGS)

        else:
            raise ExtractionError(f"Not an archive: {archive_path.name}")

    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}")

    return dest_dir


def _suffix(path: Path) -> str:
    return path.suffix.lower()


def _is_excluded(path: Path) -> bool:
    if _suffix(path) in EXCLUDED_SUFFIXES:
        return True
    return path.stem.lower() in EXCLUDED_STEMS


def _rank(path: Path, directory: Path, platform_info: PlatformInfo) -> tuple:
    """Sort key: extensionless first, then the native extension, then the rest."""
    suffix = _suffix(path)
    if suffix == "":
        kind = 0
    elif platform_info.exe_suffix and suffix == platform_info.exe_suffix:
        kind = 1
    else:
        kind = 2
    looks_runnable = 0 if is_executable(path) else 1
    depth = len(path.relative_to(directory).parts)
    return (kind, looks_runnable, depth, str(path).lower())


def find_entry_point(
    directory: Path,
    main_file: str | None,
    platform_info: PlatformInfo,
) -> Path:
    """Locate the executable to install inside an extracted tree."""
    files = sorted(p for p in directory.rglob("*") if p.is_file())
    candidates = [p for p in files if not _is_excluded(p)]
    logger.debug("Extracted %d files, %d entry point candidates", len(files), len(candidates))

    def best(matches: list[Path]) -> Path:
        return min(matches, key=lambda p: _rank(p, directory, platform_info))

    if main_file:
        wanted = Path(main_file.replace("\\", "/")).name
        exact = [p for p in candidates if p.name == wanted]
        if not exact:
            exact = [p for p in candidates if p.name.lower() == wanted.lower()]
        if exact:
            return best(exact)

        wanted_stem = Path(wanted).stem.lower()
        loose = [p for p in candidates if p.stem.lower() == wanted_stem]
        if loose:
            return best(loose)
        logger.debug("Declared entry point %s not found, guessing", main_file)

    allowed = WINDOWS_CANDIDATE_SUFFIXES if platform_info.is_windows else UNIX_CANDIDATE_SUFFIXES
    shaped = [p for p in candidates if _suffix(p) in allowed]
    if not shaped:
        raise ExtractionError("No executable found inside archive")
    return best(shaped)


def shim_path(package_name: str, bin_dir: Path, platform_info: PlatformInfo) -> Path:
    """Name-stable path a package is invoked by."""
    return bin_dir / f"{package_name}{platform_info.exe_suffix}"


def stage_executable(
    source: Path,
    bin_dir: Path,
    package_name: str,
    platform_info: PlatformInfo,
    move: bool = False,
) -> StagedBinary:
    """Copy (or move) an executable into bin_dir and refresh the package shim."""
    bin_dir.mkdir(parents=True, exist_ok=True)
    target = bin_dir / source.name
    shim = shim_path(package_name, bin_dir, platform_info)

    try:
        if move:
            logger.debug("Moving %s -> %s", source, target)
            if target.exists():
                target.unlink()
            shutil.move(str(source), str(target))
        else:
            logger.debug("Copying %s -> %s", source, target)
            shutil.copy2(source, target)

        if not platform_info.is_windows:
            make_executable(target)

        if shim != target:
            logger.debug("Refreshing shim %s", shim)
            if shim.exists():
                shim.unlink()
            shutil.copy2(target, shim)
    except OSError as e:
        raise ExtractionError(f"Failed to stage {source.name} into {bin_dir}: {e}") from e

    return StagedBinary(binary=target, shim=shim)


def install_asset(
    asset_path: Path,
    package_name: str,
    main_file: str | None,
    platform_info: PlatformInfo,
    bin_dir: Path,
) -> StagedBinary:
    """Install a downloaded asset: extract archives, or treat it as the executable itself."""
    if not is_archive(asset_path):
        return stage_executable(asset_path, bin_dir, package_name, platform_info, move=True)

    temp_dir = Path(tempfile.mkdtemp(prefix="purr_"))
    try:
        extract_archive(asset_path, temp_dir)
        entry_point = find_entry_point(temp_dir, main_file, platform_info)
        logger.debug("Selected entry point %s", entry_point.relative_to(temp_dir))
        return stage_executable(entry_point, bin_dir, package_name, platform_info)
    finally:
        cleanup_temp_dir(temp_dir)


def binary_candidates(package_name: str) -> list[str]:
    """File names a binary-shape install of package_name may have left behind."""
    return [package_name, f"{package_name}.exe", f"{package_name}.pdb"]


def is_binary_installed(package_name: str, bin_dir: Path, platform_info: PlatformInfo) -> bool:
    return shim_path(package_name, bin_dir, platform_info).is_file()


def remove_binaries(
    package_name: str,
    bin_dir: Path,
    extra: list[str] | tuple[str, ...] = (),
) -> list[str]:
    """Remove binary-shape artifacts for a package. Returns the names removed."""
    removed = []
    names = binary_candidates(package_name) + [n for n in extra if n]

    for name in dict.fromkeys(names):
        path = bin_dir / name
        logger.debug("Checking %s", path)
        if path.is_file() or path.is_symlink():
            try:
                path.unlink()
            except OSError as e:
                raise ExtractionError(f"Failed to remove {path}: {e}") from e
            removed.append(name)

    return removed


def cleanup_temp_dir(temp_dir: Path) -> None:
    """Clean up a temporary directory."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir, ignore_errors=True)
