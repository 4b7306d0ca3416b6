"""Installer script dispatch and process execution.

An installer script is resolved to an explicit (interpreter, argv) pair
before anything is spawned: first by extension, then for extensionless
files by sniffing the shebang line.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import logging
import os
import shutil
import subprocess
import threading

import click

from purr.core.extractor import make_executable
from purr.core.platform import PlatformInfo, get_platform_info

logger = logging.getLogger(__name__)

ENV_CWD = "PURR_CWD"
ENV_INSTALL_DIR = "PURR_INSTALL_DIR"
ENV_PACKAGE_NAME = "PURR_PACKAGE_NAME"

# Shells run through bash; any other shebang is honoured as written
POSIX_SHELLS = ("sh", "bash", "dash")


class UnsupportedScriptError(Exception):
    """The script type cannot be executed on this platform."""

    pass


class ScriptError(Exception):
    """A command or script exited with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ScriptKind(Enum):
    SHELL = "shell"
    POWERSHELL = "powershell"
    PYTHON = "python"
    NODE = "node"
    RUBY = "ruby"
    CMD = "cmd"
    NATIVE = "native"
    SHEBANG = "shebang"


@dataclass
class ScriptCommand:
    kind: ScriptKind
    argv: list[str]


@dataclass
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""


def _python() -> str:
    if shutil.which("python3"):
        return "python3"
    return "python"


def _by_interpreter(kind: ScriptKind, script: str) -> ScriptCommand:
    program = {
        ScriptKind.SHELL: "bash",
        ScriptKind.PYTHON: _python(),
        ScriptKind.NODE: "node",
        ScriptKind.RUBY: "ruby",
    }[kind]
    return ScriptCommand(kind, [program, script])


def read_shebang(path: Path) -> str | None:
    """Return the interpreter line of a script without the leading '#!'."""
    try:
        with open(path, "rb") as f:
            first_line = f.readline(512).decode("utf-8", errors="ignore").strip()
    except OSError as e:
        logger.debug("Could not read %s: %s", path, e)
        return None

    if not first_line.startswith("#!"):
        return None
    return first_line[2:].strip()


def _resolve_extensionless(path: Path, platform_info: PlatformInfo) -> ScriptCommand:
    script = str(path)
    shebang = read_shebang(path)

    if shebang:
        tokens = shebang.split()
        program = tokens[0] if tokens else ""
        # #!/usr/bin/env <interpreter>
        if Path(program).name == "env" and len(tokens) > 1:
            name = next((t for t in tokens[1:] if not t.startswith("-")), "")
        else:
            name = Path(program).name

        if name.startswith("python"):
            return _by_interpreter(ScriptKind.PYTHON, script)
        if name in ("node", "nodejs"):
            return _by_interpreter(ScriptKind.NODE, script)
        if name.startswith("ruby"):
            return _by_interpreter(ScriptKind.RUBY, script)
        if name in POSIX_SHELLS:
            return _by_interpreter(ScriptKind.SHELL, script)

        if program.startswith("/") and Path(program).exists():
            return ScriptCommand(ScriptKind.SHEBANG, [program, *tokens[1:], script])

    if not platform_info.is_windows:
        try:
            make_executable(path)
            return ScriptCommand(ScriptKind.NATIVE, [script])
        except OSError as e:
            logger.debug("Could not mark %s executable: %s", path, e)

    return _by_interpreter(ScriptKind.SHELL, script)


def resolve_script(path: Path, platform_info: PlatformInfo | None = None) -> ScriptCommand:
    """Work out how to run a script. Raises UnsupportedScriptError."""
    if platform_info is None:
        platform_info = get_platform_info()

    script = str(path)
    extension = path.suffix.lower()

    if extension == ".sh":
        return _by_interpreter(ScriptKind.SHELL, script)
    if extension == ".ps1":
        return ScriptCommand(
            ScriptKind.POWERSHELL,
            ["pwsh", "-ExecutionPolicy", "Bypass", "-File", script],
        )
    if extension == ".py":
        return _by_interpreter(ScriptKind.PYTHON, script)
    if extension == ".js":
        return _by_interpreter(ScriptKind.NODE, script)
    if extension == ".rb":
        return _by_interpreter(ScriptKind.RUBY, script)
    if extension in (".cmd", ".bat") and platform_info.is_windows:
        return ScriptCommand(ScriptKind.CMD, ["cmd", "/c", script])
    if extension == ".exe" and platform_info.is_windows:
        return ScriptCommand(ScriptKind.NATIVE, [script])
    if extension == "":
        return _resolve_extensionless(path, platform_info)

    raise UnsupportedScriptError(
        f"Cannot execute installer with unsupported extension: {extension}"
    )


def _drain(pipe, lines: list[str], err: bool) -> None:
    for line in iter(pipe.readline, ""):
        lines.append(line)
        click.echo(line, nl=False, err=err)
    pipe.close()


def run_command(
    argv: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    stream: bool = False,
) -> CommandResult:
    """Run a command and wait for it.

    With stream=True output is echoed live; stdout and stderr are drained on
    separate threads so neither pipe can fill up and stall the child.
    Raises ScriptError on a non-zero exit status.
    """
    logger.debug("Running: %s%s", " ".join(argv), f" (in {cwd})" if cwd else "")
    full_env = None
    if env:
        full_env = os.environ.copy()
        full_env.update({k: v for k, v in env.items() if v is not None})

    try:
        if stream:
            process = subprocess.Popen(
                argv,
                cwd=cwd,
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
            stdout_lines: list[str] = []
            stderr_lines: list[str] = []
            threads = [
                threading.Thread(target=_drain, args=(process.stdout, stdout_lines, False)),
                threading.Thread(target=_drain, args=(process.stderr, stderr_lines, True)),
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
            returncode = process.wait()
            result = CommandResult(returncode, "".join(stdout_lines), "".join(stderr_lines))
        else:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                env=full_env,
                capture_output=True,
                text=True,
                errors="replace",
            )
            result = CommandResult(completed.returncode, completed.stdout, completed.stderr)
    except OSError as e:
        raise ScriptError(f"Could not start {argv[0]}: {e}") from e

    if result.returncode != 0:
        detail = result.stderr.strip() if not stream else ""
        message = f"Command failed with exit code {result.returncode}: {' '.join(argv)}"
        if detail:
            message += f"\n{detail}"
        raise ScriptError(message, returncode=result.returncode, stderr=result.stderr)

    return result


def run_script(
    script_path: Path,
    package_name: str,
    install_dir: Path | None = None,
    stream: bool = True,
    platform_info: PlatformInfo | None = None,
) -> CommandResult:
    """Run an installer or uninstaller script with purr's context variables set."""
    command = resolve_script(script_path, platform_info)
    install_dir = install_dir or script_path.parent
    env = {
        ENV_CWD: os.getcwd(),
        ENV_INSTALL_DIR: str(install_dir),
        ENV_PACKAGE_NAME: package_name,
    }
    logger.debug("Resolved %s as %s", script_path.name, command.kind.value)
    return run_command(command.argv, cwd=install_dir, env=env, stream=stream)

