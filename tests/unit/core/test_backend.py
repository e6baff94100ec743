from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

import pytest

from fudge.core.actions import Action
from fudge.core.backend import ChocolateyBackend, InstalledPackage, parse_limited_output
from fudge.core.exceptions import BackendError
from fudge.core.manifest import PackageSpec
from fudge.core.utils import subprocess as fudge_subprocess


class RecordingRunner:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: List[tuple] = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        return subprocess.CompletedProcess(argv, self.returncode, stdout=self.stdout, stderr=self.stderr)


def _backend(runner: RecordingRunner) -> ChocolateyBackend:
    return ChocolateyBackend(executable="choco", confirm_flag="-y", run_func=runner)


def test_install_argv_pins_version_source_and_args() -> None:
    backend = _backend(RecordingRunner())
    spec = PackageSpec(name="nodejs", version="8.9.0", source="internal", args="--x86 --params '/A B'")

    assert backend.action_argv(Action.INSTALL, spec) == [
        "choco", "install", "nodejs", "-y",
        "--version", "8.9.0",
        "--source", "internal",
        "--x86", "--params", "/A B",
    ]


def test_install_args_keep_windows_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fudge_subprocess, "POSIX_SPLIT", False)
    backend = _backend(RecordingRunner())
    spec = PackageSpec(
        name="git",
        args=r'--install-arguments=C:\Tools\Git --cache-location "C:\Choco Cache"',
    )

    assert backend.action_argv(Action.INSTALL, spec) == [
        "choco", "install", "git", "-y",
        r"--install-arguments=C:\Tools\Git",
        "--cache-location", r"C:\Choco Cache",
    ]


def test_unpinned_upgrade_has_no_version() -> None:
    backend = _backend(RecordingRunner())
    assert backend.action_argv(Action.UPGRADE, PackageSpec(name="git")) == ["choco", "upgrade", "git", "-y"]


def test_uninstall_ignores_version_and_removes_dependencies() -> None:
    backend = _backend(RecordingRunner())
    argv = backend.action_argv(Action.UNINSTALL, PackageSpec(name="git", version="1.0"))
    assert argv == ["choco", "uninstall", "git", "-y", "--force-dependencies"]


@pytest.mark.parametrize("action", [Action.REINSTALL, Action.LIST, Action.PACK])
def test_action_argv_rejects_composite_actions(action: Action) -> None:
    with pytest.raises(ValueError):
        _backend(RecordingRunner()).action_argv(action, PackageSpec(name="git"))


def test_run_action_uses_install_timeout_bucket() -> None:
    runner = RecordingRunner(stdout="Chocolatey installed 1/1 packages.")
    result = _backend(runner).run_action(Action.INSTALL, PackageSpec(name="git", version="1.0"))

    assert result.ok is True
    assert result.output == "Chocolatey installed 1/1 packages."
    assert runner.calls[0][1]["timeout_type"] == "install"
    assert runner.calls[0][1]["capture_output"] is True


def test_run_action_failure_is_reported_not_raised() -> None:
    runner = RecordingRunner(returncode=1, stdout="", stderr="package not found")
    result = _backend(runner).run_action(Action.INSTALL, PackageSpec(name="nope"))

    assert result.ok is False
    assert result.returncode == 1
    assert result.message == "exit code 1"
    assert result.output == "package not found"


def test_run_action_timeout_is_reported() -> None:
    def runner(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, 3600)

    backend = ChocolateyBackend(executable="choco", confirm_flag="-y", run_func=runner)
    result = backend.run_action(Action.UPGRADE, PackageSpec(name="git"))
    assert result.ok is False
    assert "timed out" in result.message


def test_run_action_missing_executable_is_reported() -> None:
    def runner(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "choco")

    backend = ChocolateyBackend(executable="choco", confirm_flag="-y", run_func=runner)
    assert backend.run_action(Action.INSTALL, PackageSpec(name="git")).ok is False


def test_pack_runs_from_spec_directory(tmp_path: Path) -> None:
    runner = RecordingRunner()
    spec_path = tmp_path / "nuspecs" / "website.nuspec"

    result = _backend(runner).pack("website", spec_path)

    argv, kwargs = runner.calls[0]
    assert result.ok
    assert argv == ["choco", "pack", str(spec_path)]
    assert kwargs["cwd"] == spec_path.parent


def test_parse_limited_output_skips_noise() -> None:
    text = "Chocolatey v2.2.2\ngit|2.43.0\n\n7zip|23.1.0\n2 packages installed.\nbroken|\n"
    assert parse_limited_output(text) == [
        InstalledPackage("git", "2.43.0"),
        InstalledPackage("7zip", "23.1.0"),
        InstalledPackage("broken", ""),
    ]


def test_installed_packages_keyed_by_lowercase_name() -> None:
    runner = RecordingRunner(stdout="Git|2.43.0\nchocolatey|2.2.2\n")
    installed = _backend(runner).installed_packages()

    assert runner.calls[0][0] == ["choco", "list", "--limit-output"]
    assert runner.calls[0][1]["timeout_type"] == "query"
    assert installed["git"] == InstalledPackage("Git", "2.43.0")
    assert set(installed) == {"git", "chocolatey"}


def test_search_passes_limit_as_page_size() -> None:
    runner = RecordingRunner(stdout="checksum|0.3.1\nchecksum.portable|0.3.1\nfilechecksum|1.0\n")
    backend = _backend(runner)

    # Sources that ignore paging are still capped.
    assert [p.name for p in backend.search("checksum", limit=2)] == ["checksum", "checksum.portable"]
    assert runner.calls[0][0] == [
        "choco", "search", "checksum", "--limit-output", "--page=0", "--page-size=2",
    ]


def test_search_without_limit_fetches_everything() -> None:
    runner = RecordingRunner(stdout="checksum|0.3.1\nchecksum.portable|0.3.1\nfilechecksum|1.0\n")

    assert len(_backend(runner).search("checksum", limit=0)) == 3
    assert runner.calls[0][0] == ["choco", "search", "checksum", "--limit-output"]


def test_query_failure_raises_backend_error() -> None:
    runner = RecordingRunner(returncode=1, stderr="unable to reach source")
    with pytest.raises(BackendError) as excinfo:
        _backend(runner).installed_packages()
    assert excinfo.value.context["returncode"] == 1
    assert excinfo.value.context["argv"] == ["choco", "list", "--limit-output"]
    assert excinfo.value.context["output"] == "unable to reach source"


def test_backend_defaults_come_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUDGE_BACKEND__EXECUTABLE", "C:/tools/choco.exe")
    backend = ChocolateyBackend(run_func=RecordingRunner())
    assert backend.executable == "C:/tools/choco.exe"
    assert backend.confirm_flag == "-y"
