from __future__ import annotations

from fudge.core.exceptions import BackendError, FudgeError, NotFoundError


def test_context_is_copied_and_serialised() -> None:
    ctx = {"path": "Fudgefile"}
    err = NotFoundError("missing", context=ctx)
    ctx["path"] = "changed"

    assert isinstance(err, FileNotFoundError)
    assert err.to_json_error() == {"message": "missing", "code": "NotFoundError", "context": {"path": "Fudgefile"}}


def test_backend_error_records_invocation_details() -> None:
    err = BackendError("failed", argv=["choco", "list"], returncode=1, output="", context={"key": "git"})
    assert isinstance(err, FudgeError)
    # Empty output is not recorded
    assert err.context == {"key": "git", "argv": ["choco", "list"], "returncode": 1}
