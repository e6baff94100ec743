"""Actions Fudge can run and validation of the raw CLI input into a request."""
from __future__ import annotations

import argparse
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from fudge.core.exceptions import InvalidActionError

DEFAULT_FUDGEFILE = "Fudgefile"
DEFAULT_SEARCH_LIMIT = 10


class Action(str, Enum):
    INSTALL = "install"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"
    REINSTALL = "reinstall"
    PACK = "pack"
    LIST = "list"
    SEARCH = "search"
    NEW = "new"
    DELETE = "delete"


# Actions operating on the packages/devPackages sections.
PACKAGE_ACTIONS = frozenset(
    {Action.INSTALL, Action.UPGRADE, Action.UNINSTALL, Action.REINSTALL, Action.LIST}
)

# Actions that can run without elevation (unless their install/uninstall switch is set).
UNPRIVILEGED_ACTIONS = frozenset({Action.LIST, Action.SEARCH, Action.NEW, Action.DELETE})

# Actions that read an existing Fudgefile before dispatch.
MANIFEST_ACTIONS = PACKAGE_ACTIONS | {Action.PACK}

# Actions that may run Fudgefile pre/post scripts.
SCRIPTED_ACTIONS = frozenset(
    {Action.INSTALL, Action.UPGRADE, Action.UNINSTALL, Action.REINSTALL, Action.PACK}
)


def parse_action(raw: Optional[str]) -> Action:
    v = str(raw or "").strip().lower()
    if not v:
        raise InvalidActionError("No action supplied")
    for action in Action:
        if v == action.value:
            return action
    expected = ", ".join(a.value for a in Action)
    raise InvalidActionError(
        f"Unrecognised action supplied '{raw}', should be one of: {expected}",
        context={"action": raw},
    )


@dataclass(frozen=True)
class InvocationRequest:
    action: Action
    key: Optional[str] = None
    dev: bool = False
    dev_only: bool = False
    limit: int = DEFAULT_SEARCH_LIMIT
    install: bool = False
    uninstall: bool = False
    fudgefile_path: Path = Path(DEFAULT_FUDGEFILE)

    @property
    def is_package_action(self) -> bool:
        return self.action in PACKAGE_ACTIONS

    @property
    def needs_manifest(self) -> bool:
        return self.action in MANIFEST_ACTIONS


def validate_request(args: argparse.Namespace) -> InvocationRequest:
    """Turn parsed CLI flags into an :class:`InvocationRequest`.

    Pure: no file-system or backend access happens here.

    Raises:
        InvalidActionError: For a missing/unknown action, a negative limit,
            or a search without a search term.
    """
    action = parse_action(getattr(args, "action", None))

    key = str(getattr(args, "key", None) or "").strip() or None
    dev_only = bool(getattr(args, "dev_only", False))
    dev = bool(getattr(args, "dev", False)) or dev_only

    limit = getattr(args, "limit", DEFAULT_SEARCH_LIMIT)
    limit = DEFAULT_SEARCH_LIMIT if limit is None else int(limit)
    if limit < 0:
        raise InvalidActionError(f"Limit must be 0 (unlimited) or greater, got {limit}")

    if action is Action.SEARCH and not key:
        raise InvalidActionError("A key is required to search for packages")

    raw_path = getattr(args, "fudgefile_path", None) or DEFAULT_FUDGEFILE
    fudgefile_path = Path(raw_path).expanduser()

    return InvocationRequest(
        action=action,
        key=key,
        dev=dev,
        dev_only=dev_only,
        limit=limit,
        install=bool(getattr(args, "install", False)),
        uninstall=bool(getattr(args, "uninstall", False)),
        fudgefile_path=fudgefile_path,
    )


__all__ = [
    "Action",
    "InvocationRequest",
    "PACKAGE_ACTIONS",
    "UNPRIVILEGED_ACTIONS",
    "MANIFEST_ACTIONS",
    "SCRIPTED_ACTIONS",
    "DEFAULT_FUDGEFILE",
    "DEFAULT_SEARCH_LIMIT",
    "parse_action",
    "validate_request",
]
