"""Advice for putting the purr bin directory on PATH."""

from dataclasses import dataclass, field
from pathlib import Path
import os

from purr.core.platform import PlatformInfo


@dataclass
class PathAdvice:
    on_path: bool
    shell: str
    # (label, command) pairs
    lines: list[tuple[str, str]] = field(default_factory=list)


def _normalize(path: str, windows: bool) -> str:
    normalized = os.path.normpath(os.path.expanduser(path.strip().strip('"')))
    return normalized.lower() if windows else normalized


def detect_shell(environ: dict, platform_info: PlatformInfo) -> str:
    """Guess the user's shell flavor from environment hints."""
    if platform_info.is_windows:
        return "powershell" if environ.get("PSModulePath") else "cmd"

    shell = Path(environ.get("SHELL", "")).name
    for flavor in ("zsh", "bash", "fish"):
        if flavor in shell:
            return flavor
    return "sh"


def path_advice(bin_dir: Path, environ: dict, platform_info: PlatformInfo) -> PathAdvice:
    """Compare bin_dir against PATH and build shell commands to add it."""
    windows = platform_info.is_windows
    separator = ";" if windows else ":"
    target = _normalize(str(bin_dir), windows)
    entries = [e for e in environ.get("PATH", "").split(separator) if e.strip()]
    shell = detect_shell(environ, platform_info)

    if any(_normalize(entry, windows) == target for entry in entries):
        return PathAdvice(on_path=True, shell=shell)

    lines = []
    if windows:
        if shell == "powershell":
            lines.append(("PowerShell (current session)", f'$env:Path = "{bin_dir};$env:Path"'))
            lines.append((
                "PowerShell (persist)",
                f'[Environment]::SetEnvironmentVariable("Path", "{bin_dir};" + '
                f'[Environment]::GetEnvironmentVariable("Path", "User"), "User")',
            ))
        else:
            lines.append(("Command Prompt (current session)", f'set "PATH={bin_dir};%PATH%"'))
            lines.append(("Command Prompt (persist)", f'setx PATH "{bin_dir};%PATH%"'))
    elif shell == "fish":
        lines.append(("Fish shell (persistent)", f"fish_add_path {bin_dir}"))
    else:
        rc_file = {"zsh": "~/.zshrc", "bash": "~/.bashrc"}.get(shell, "~/.profile")
        export = f'export PATH="{bin_dir}:$PATH"'
        lines.append(("Add to current session", export))
        lines.append((f"Persist for future sessions (append to {rc_file})", f"echo '{export}' >> {rc_file}"))

    return PathAdvice(on_path=False, shell=shell, lines=lines)
