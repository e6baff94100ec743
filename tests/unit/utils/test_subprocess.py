from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from fudge.core.utils import subprocess as fudge_subprocess
from fudge.core.utils.subprocess import (
    configured_timeout,
    run_command,
    run_command_from_string,
    split_command,
)


def test_configured_timeout_buckets(monkeypatch: pytest.MonkeyPatch) -> None:
    assert configured_timeout("install") == 3600.0
    assert configured_timeout("query") == 120.0
    assert configured_timeout(None) == 600.0
    assert configured_timeout("unknown") == 600.0

    monkeypatch.setenv("FUDGE_TIMEOUTS__QUERY_SECONDS", "7")
    assert configured_timeout("query") == 7.0


def test_run_command_captures_output(tmp_path: Path) -> None:
    result = run_command(
        [sys.executable, "-c", "import os; print(os.getcwd())"],
        cwd=tmp_path,
        capture_output=True,
    )
    assert result.returncode == 0
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()


def test_run_command_reports_nonzero_exit() -> None:
    result = run_command([sys.executable, "-c", "import sys; sys.exit(4)"], capture_output=True)
    assert result.returncode == 4


def test_run_command_check_raises() -> None:
    with pytest.raises(subprocess.CalledProcessError):
        run_command([sys.executable, "-c", "import sys; sys.exit(1)"], capture_output=True, check=True)


def test_run_command_times_out() -> None:
    with pytest.raises(subprocess.TimeoutExpired):
        run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"],
            capture_output=True,
            timeout=0.5,
        )


def test_run_command_from_string_splits_and_appends(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_run_with_timeout(cmd, timeout_type=None, **kwargs):
        seen["cmd"] = cmd
        seen["timeout_type"] = timeout_type
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(fudge_subprocess, "run_with_timeout", fake_run_with_timeout)
    run_command_from_string("choco pack 'my spec.nuspec'", ["--out", "dist"], timeout_type="default")

    assert seen["cmd"] == ["choco", "pack", "my spec.nuspec", "--out", "dist"]
    assert seen["timeout_type"] == "default"


def test_run_command_from_string_rejects_empty() -> None:
    with pytest.raises(ValueError):
        run_command_from_string("   ")


def test_split_command_posix_rules(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fudge_subprocess, "POSIX_SPLIT", True)
    assert split_command("./setup.sh --name 'my app'") == ["./setup.sh", "--name", "my app"]


def test_split_command_windows_rules_keep_backslashes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fudge_subprocess, "POSIX_SPLIT", False)
    assert split_command(r'.\scripts\setup.bat /D "C:\Program Files\App" --x86') == [
        r".\scripts\setup.bat",
        "/D",
        r"C:\Program Files\App",
        "--x86",
    ]


def test_run_command_from_string_keeps_windows_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_run_with_timeout(cmd, timeout_type=None, **kwargs):
        seen["cmd"] = cmd
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(fudge_subprocess, "POSIX_SPLIT", False)
    monkeypatch.setattr(fudge_subprocess, "run_with_timeout", fake_run_with_timeout)
    run_command_from_string(r".\scripts\setup.bat")

    assert seen["cmd"] == [r".\scripts\setup.bat"]
