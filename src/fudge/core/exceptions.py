from __future__ import annotations

from typing import Any, Dict, Mapping


class FudgeError(Exception):
    """Base exception for Fudge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class InvalidActionError(FudgeError, ValueError):
    """Raised when the requested action (or its flags) cannot be run."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class NotFoundError(FudgeError, FileNotFoundError):
    """Raised when a Fudgefile or a pack spec it references does not exist."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class AlreadyExistsError(FudgeError, FileExistsError):
    """Raised when a Fudgefile is about to be created over an existing one."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        FileExistsError.__init__(self, message)


class ParseError(FudgeError, ValueError):
    """Raised when a Fudgefile is malformed or fails schema validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class InstallError(FudgeError, RuntimeError):
    """Raised when the package manager backend cannot be bootstrapped."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class BackendError(FudgeError, RuntimeError):
    """Raised when a backend invocation exits non-zero or times out."""

    def __init__(
        self,
        message: str,
        *,
        argv: list[str] | None = None,
        returncode: int | None = None,
        output: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if argv:
            ctx["argv"] = list(argv)
        if returncode is not None:
            ctx["returncode"] = returncode
        if output:
            ctx["output"] = output
        FudgeError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)


class HookError(FudgeError, RuntimeError):
    """Raised when a Fudgefile pre/post script fails."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FudgeError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "FudgeError",
    "InvalidActionError",
    "NotFoundError",
    "AlreadyExistsError",
    "ParseError",
    "InstallError",
    "BackendError",
    "HookError",
]
