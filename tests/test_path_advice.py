"""
Tests for PATH advice.
"""

from pathlib import Path

from purr.core.path_advice import detect_shell, path_advice


class TestDetectShell:
    def test_unix_shells(self, linux_x64):
        assert detect_shell({"SHELL": "/usr/bin/zsh"}, linux_x64) == "zsh"
        assert detect_shell({"SHELL": "/bin/bash"}, linux_x64) == "bash"
        assert detect_shell({"SHELL": "/usr/local/bin/fish"}, linux_x64) == "fish"
        assert detect_shell({}, linux_x64) == "sh"

    def test_windows(self, win_x64):
        assert detect_shell({"PSModulePath": "C:\\x"}, win_x64) == "powershell"
        assert detect_shell({}, win_x64) == "cmd"


class TestPathAdvice:
    def test_already_on_path(self, tmp_path, linux_x64):
        bin_dir = tmp_path / "bin"
        environ = {"PATH": f"/usr/bin:{bin_dir}/:/bin", "SHELL": "/bin/bash"}

        advice = path_advice(bin_dir, environ, linux_x64)

        assert advice.on_path
        assert advice.lines == []

    def test_bash(self, linux_x64):
        bin_dir = Path("/home/u/.purr/bin")
        advice = path_advice(bin_dir, {"PATH": "/usr/bin", "SHELL": "/bin/bash"}, linux_x64)

        assert not advice.on_path
        commands = [command for _, command in advice.lines]
        assert commands[0] == 'export PATH="/home/u/.purr/bin:$PATH"'
        assert commands[1].endswith(">> ~/.bashrc")

    def test_fish(self, linux_x64):
        advice = path_advice(Path("/home/u/.purr/bin"), {"PATH": "", "SHELL": "/usr/bin/fish"}, linux_x64)
        assert advice.lines == [("Fish shell (persistent)", "fish_add_path /home/u/.purr/bin")]

    def test_unknown_shell_uses_profile(self, linux_x64):
        advice = path_advice(Path("/opt/purr/bin"), {"PATH": ""}, linux_x64)
        assert advice.shell == "sh"
        assert "~/.profile" in advice.lines[1][0]

    def test_powershell(self, win_x64):
        environ = {"PATH": "C:\\Windows", "PSModulePath": "C:\\Modules"}
        advice = path_advice(Path("C:/Users/u/.purr/bin"), environ, win_x64)

        assert advice.shell == "powershell"
        assert advice.lines[0][1].startswith("$env:Path = ")

    def test_cmd(self, win_x64):
        advice = path_advice(Path("C:/purr/bin"), {"PATH": "C:\\Windows"}, win_x64)
        assert advice.lines[1][1].startswith("setx PATH")
