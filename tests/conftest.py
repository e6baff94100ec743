import json
import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'fudge' and tests/ importable for 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_fudge_caches
from helpers.fake_backend import FakeBackend


@pytest.fixture(autouse=True)
def _isolate_fudge_env(tmp_path_factory, monkeypatch):
    """Every test gets its own FUDGE_HOME and no FUDGE_* overrides from the shell."""
    for key in list(os.environ):
        if key.startswith("FUDGE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FUDGE_HOME", str(tmp_path_factory.mktemp("fudge-home")))
    reset_fudge_caches()
    yield
    reset_fudge_caches()


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Empty project directory, used as the cwd."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_fudgefile(project_dir):
    """Write a JSON Fudgefile into the project directory and return its path."""

    def _write(data, name: str = "Fudgefile") -> Path:
        path = project_dir / name
        path.write_text(json.dumps(data, indent=4), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def elevated(monkeypatch):
    """Pretend to run as Administrator with Chocolatey on PATH."""
    import fudge.cli._handlers as handlers

    monkeypatch.setattr(handlers, "is_elevated", lambda: True)
    monkeypatch.setattr(handlers, "is_backend_installed", lambda executable=None: True)
    return True


@pytest.fixture
def not_elevated(monkeypatch):
    import fudge.cli._handlers as handlers

    monkeypatch.setattr(handlers, "is_elevated", lambda: False)
    monkeypatch.setattr(handlers, "is_backend_installed", lambda executable=None: True)
    return False
