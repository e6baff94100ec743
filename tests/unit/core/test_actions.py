from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from fudge.core.actions import (
    Action,
    DEFAULT_SEARCH_LIMIT,
    InvocationRequest,
    parse_action,
    validate_request,
)
from fudge.core.exceptions import InvalidActionError


def _ns(**overrides) -> argparse.Namespace:
    values = {
        "action": None,
        "key": None,
        "dev": False,
        "dev_only": False,
        "limit": DEFAULT_SEARCH_LIMIT,
        "install": False,
        "uninstall": False,
        "fudgefile_path": "Fudgefile",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.mark.parametrize("raw", ["install", "INSTALL", " Reinstall ", "pack", "list", "search", "new", "delete"])
def test_parse_action_is_case_insensitive(raw: str) -> None:
    assert parse_action(raw).value == raw.strip().lower()


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_action_rejects_missing_action(raw) -> None:
    with pytest.raises(InvalidActionError, match="No action supplied"):
        parse_action(raw)


@pytest.mark.parametrize("raw", ["instal", "remove", "update", "install-all"])
def test_parse_action_rejects_unknown_action(raw: str) -> None:
    with pytest.raises(InvalidActionError) as excinfo:
        parse_action(raw)
    assert "Unrecognised action" in str(excinfo.value)
    assert excinfo.value.context == {"action": raw}


def test_validate_request_does_no_file_io_for_bad_action(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # The path points nowhere; an I/O attempt would raise NotFoundError instead.
    with pytest.raises(InvalidActionError):
        validate_request(_ns(action="bogus", fudgefile_path=str(tmp_path / "missing" / "Fudgefile")))


@pytest.mark.parametrize("action", [a.value for a in Action if a is not Action.SEARCH])
def test_dev_only_implies_dev(action: str) -> None:
    request = validate_request(_ns(action=action, dev_only=True))
    assert request.dev_only is True
    assert request.dev is True


def test_dev_alone_does_not_set_dev_only() -> None:
    request = validate_request(_ns(action="install", dev=True))
    assert request.dev is True
    assert request.dev_only is False


def test_validate_request_defaults() -> None:
    request = validate_request(_ns(action="install"))
    assert request == InvocationRequest(action=Action.INSTALL)
    assert request.fudgefile_path == Path("Fudgefile")
    assert request.is_package_action
    assert request.needs_manifest


def test_validate_request_blank_key_is_none() -> None:
    assert validate_request(_ns(action="install", key="  ")).key is None


def test_search_requires_key() -> None:
    with pytest.raises(InvalidActionError, match="key is required"):
        validate_request(_ns(action="search"))


def test_negative_limit_is_rejected() -> None:
    with pytest.raises(InvalidActionError, match="Limit"):
        validate_request(_ns(action="search", key="git", limit=-1))


def test_zero_limit_means_unlimited_and_is_kept() -> None:
    request = validate_request(_ns(action="search", key="checksum", limit=0))
    assert request.limit == 0
    assert request.key == "checksum"


def test_manifest_requirements_per_action() -> None:
    assert not InvocationRequest(action=Action.SEARCH).needs_manifest
    assert not InvocationRequest(action=Action.NEW).needs_manifest
    assert not InvocationRequest(action=Action.DELETE).needs_manifest
    assert InvocationRequest(action=Action.PACK).needs_manifest
    assert not InvocationRequest(action=Action.PACK).is_package_action


def test_request_is_immutable() -> None:
    request = InvocationRequest(action=Action.LIST)
    with pytest.raises(AttributeError):
        request.key = "git"  # type: ignore[misc]
